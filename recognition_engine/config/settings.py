"""
Application settings and environment configuration.

- DATABASE_URL / RECOGNITION_DB_URL: SQLAlchemy URL (PostgreSQL in production).
- RECOGNITION_DB_PATH: SQLite file used when no URL is set (default: recognition.db).
- RESULTS_MAX_WORKERS: bounded thread pool size for per-theme computation (default: 4).
- RESULTS_LOCK_TTL_SEC: age after which a cycle lock is considered stale (default: 900).
- DEFAULT_CLIQUE_THRESHOLD: used when a cycle's fairness_config has none (default: 3).
- API_HOST / API_PORT: uvicorn bind address.
- Loads .env from project root when available.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_CONFIG_DIR = Path(__file__).resolve().parent
_ROOT = _CONFIG_DIR.parent.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_SQLITE_PATH = "recognition.db"
DEFAULT_MAX_WORKERS = 4
DEFAULT_LOCK_TTL_SEC = 900.0
DEFAULT_CLIQUE_THRESHOLD = 3


@dataclass(frozen=True)
class Settings:
    """Typed service settings."""

    database_url: str
    max_workers: int = DEFAULT_MAX_WORKERS
    lock_ttl_sec: float = DEFAULT_LOCK_TTL_SEC
    default_clique_threshold: int = DEFAULT_CLIQUE_THRESHOLD
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "info"


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def get_database_url() -> str:
    """Return RECOGNITION_DB_URL or DATABASE_URL if set; else SQLite from RECOGNITION_DB_PATH."""
    url = (os.getenv("RECOGNITION_DB_URL") or os.getenv("DATABASE_URL") or "").strip()
    if url:
        return url
    path = (os.getenv("RECOGNITION_DB_PATH") or "").strip() or DEFAULT_SQLITE_PATH
    return f"sqlite:///{path}"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Cached after first call; use reset_settings_cache() after changing env in tests.
    """
    load_dotenv(_ENV_PATH)
    return Settings(
        database_url=get_database_url(),
        max_workers=max(1, _env_int("RESULTS_MAX_WORKERS", DEFAULT_MAX_WORKERS)),
        lock_ttl_sec=max(0.0, _env_float("RESULTS_LOCK_TTL_SEC", DEFAULT_LOCK_TTL_SEC)),
        default_clique_threshold=max(1, _env_int("DEFAULT_CLIQUE_THRESHOLD", DEFAULT_CLIQUE_THRESHOLD)),
        api_host=(os.getenv("API_HOST") or "0.0.0.0").strip(),
        api_port=_env_int("API_PORT", 8000),
        log_level=(os.getenv("LOG_LEVEL") or "info").strip().lower(),
    )


def reset_settings_cache() -> None:
    """Drop cached settings. For tests only."""
    get_settings.cache_clear()

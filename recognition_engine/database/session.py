"""
Engine and session management.

Uses RECOGNITION_DB_URL / DATABASE_URL (PostgreSQL in production) when set;
otherwise falls back to SQLite (RECOGNITION_DB_PATH or recognition.db).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from recognition_engine.config import get_settings
from recognition_engine.database.models import Base
from recognition_engine.recognition_logging import get_logger

logger = get_logger(__name__)

_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def _redact_url(url: str) -> str:
    return url.split("?")[0].split("@")[-1].split("//")[-1]


def get_engine() -> Engine:
    """Create or return cached engine."""
    global _engine
    if _engine is None:
        url = get_settings().database_url
        connect_args: dict[str, Any] = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        logger.info("recognition_db_engine", url=_redact_url(url))
    return _engine


def _get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


@contextmanager
def session_scope() -> Iterator[Session]:
    """Context manager for a single session. Commits on success, rolls back on error."""
    session = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create all tables if they do not exist. Safe to call on every startup."""
    try:
        Base.metadata.create_all(bind=get_engine())
        logger.info("recognition_db_init", url=_redact_url(get_settings().database_url))
    except Exception as e:
        logger.exception("recognition_db_init_failed", error=str(e))
        raise


def reset_engine_for_test() -> None:
    """Dispose and forget the cached engine and session factory. For tests only."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None

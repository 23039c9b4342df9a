"""
Cycle results runner — loads a cycle snapshot and drives the per-theme pipeline.

- calculate_cycle_results(): single synchronous batch job for one cycle.
  Theme computation runs in a bounded thread pool (pure functions over the
  snapshot); writes run afterwards, theme by theme, under the per-cycle lock.
- Pre-write failures (unknown cycle, no themes, no eligible nominations,
  invalid weights) raise before anything is written.
- Write failures are recorded per theme; the cycle is announced only when all
  themes were published, so a re-run after any failure is safe.
"""

from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy.orm import Session

from recognition_engine.analysis_engine.models import CycleSnapshot
from recognition_engine.analysis_engine.pipeline import ThemeComputation, compute_theme
from recognition_engine.config import get_settings
from recognition_engine.core.exceptions import ConfigurationError, PersistenceError
from recognition_engine.database import repositories
from recognition_engine.database.models import STATUS_ANNOUNCED
from recognition_engine.database.session import session_scope
from recognition_engine.recognition_logging import bind_cycle
from recognition_engine.results_worker.publisher import ResultsPublisher, ThemeOutcome

DEFAULT_MAX_WORKERS = 4
DEFAULT_LOCK_TTL_SEC = 900.0
MIN_WORKERS = 1


@dataclass
class RunnerConfig:
    """
    Config for one calculation run.

    max_workers: Upper bound on themes computed in parallel.
    lock_ttl_sec: Age after which another run's cycle lock is considered stale.
    default_clique_threshold: Used when the cycle's fairness_config has none.
    """

    max_workers: int = DEFAULT_MAX_WORKERS
    lock_ttl_sec: float = DEFAULT_LOCK_TTL_SEC
    default_clique_threshold: int = 3

    def __post_init__(self) -> None:
        self.max_workers = max(MIN_WORKERS, int(self.max_workers))

    @classmethod
    def from_settings(cls) -> "RunnerConfig":
        settings = get_settings()
        return cls(
            max_workers=settings.max_workers,
            lock_ttl_sec=settings.lock_ttl_sec,
            default_clique_threshold=settings.default_clique_threshold,
        )


@dataclass
class CycleCalculationResult:
    cycle_id: str
    success: bool
    status: str
    themes: list[ThemeOutcome] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": self.success,
            "cycle_id": self.cycle_id,
            "status": self.status,
            "themes": [t.to_dict() for t in self.themes],
        }
        if self.error:
            out["error"] = self.error
        return out


def compute_themes(snapshot: CycleSnapshot, max_workers: int) -> list[ThemeComputation]:
    """
    Run the pure pipeline for every theme, in parallel, in snapshot order.

    The first theme error is re-raised after all workers finish, so nothing is
    written when any computation fails.
    """
    cycle_nominations = snapshot.all_nominations
    workers = max(MIN_WORKERS, min(max_workers, len(snapshot.themes)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="theme-calc") as executor:
        futures = [
            executor.submit(compute_theme, theme, snapshot.fairness_config, cycle_nominations)
            for theme in snapshot.themes
        ]
        return [f.result() for f in futures]


def publish_themes(
    snapshot: CycleSnapshot,
    computations: list[ThemeComputation],
    publisher: ResultsPublisher,
) -> list[ThemeOutcome]:
    """Publish every theme; a failed theme is recorded and the rest still run."""
    log = bind_cycle(snapshot.id)
    outcomes: list[ThemeOutcome] = []
    for computation in computations:
        try:
            outcomes.append(
                publisher.publish_theme(
                    tenant_id=snapshot.tenant_id,
                    cycle_id=snapshot.id,
                    computation=computation,
                )
            )
        except PersistenceError as e:
            log.warning("theme_outcome_failed", theme_id=computation.theme_id, error=e.message)
            outcomes.append(
                ThemeOutcome(
                    theme_id=computation.theme_id,
                    theme_name=computation.theme_name,
                    success=False,
                    error=e.message,
                )
            )
    return outcomes


def calculate_cycle_results(
    cycle_id: str | None,
    config: RunnerConfig | None = None,
    *,
    session_factory: Callable[[], AbstractContextManager[Session]] = session_scope,
    publisher: ResultsPublisher | None = None,
) -> CycleCalculationResult:
    """
    Calculate and publish the results of a cycle.

    Raises:
        ConfigurationError: cycle_id missing or cycle not found.
        DataIntegrityError: no themes, no eligible nominations, or invalid weights.
        CycleLockedError: another run of the same cycle holds the lock.

    Returns:
        CycleCalculationResult; success is False when any theme write failed,
        in which case the cycle status is unchanged.
    """
    cycle_id = (cycle_id or "").strip()
    if not cycle_id:
        raise ConfigurationError("cycle_id required")
    cfg = config or RunnerConfig.from_settings()
    publisher = publisher or ResultsPublisher(session_factory)
    log = bind_cycle(cycle_id)

    with session_factory() as session:
        snapshot = repositories.load_cycle_snapshot(
            session, cycle_id, default_clique_threshold=cfg.default_clique_threshold
        )
    computations = compute_themes(snapshot, cfg.max_workers)
    log.info("cycle_themes_computed", themes=len(computations), max_workers=cfg.max_workers)

    owner = uuid.uuid4().hex
    with session_factory() as session:
        repositories.acquire_cycle_lock(session, cycle_id, owner, ttl_sec=cfg.lock_ttl_sec)
    try:
        outcomes = publish_themes(snapshot, computations, publisher)
        try:
            announced = publisher.advance_cycle(cycle_id, outcomes)
        except PersistenceError as e:
            return CycleCalculationResult(
                cycle_id=cycle_id, success=False, status=snapshot.status, themes=outcomes, error=e.message
            )
    finally:
        with session_factory() as session:
            repositories.release_cycle_lock(session, cycle_id, owner)

    if not announced:
        failed = [o.theme_name for o in outcomes if not o.success]
        return CycleCalculationResult(
            cycle_id=cycle_id,
            success=False,
            status=snapshot.status,
            themes=outcomes,
            error=f"Failed to publish results for themes: {', '.join(failed)}",
        )
    log.info("cycle_calculation_completed", themes=len(outcomes))
    return CycleCalculationResult(cycle_id=cycle_id, success=True, status=STATUS_ANNOUNCED, themes=outcomes)

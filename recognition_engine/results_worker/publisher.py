"""
Results publisher — idempotent writes of theme results and nominee rankings.

Each theme is published in its own transaction: upsert of the theme result on
(theme_id, cycle_id), then delete-and-insert of its ranking rows. The cycle is
advanced to `announced` only when every theme outcome succeeded.
"""

from __future__ import annotations

import time
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from recognition_engine.analysis_engine.pipeline import ThemeComputation
from recognition_engine.core.exceptions import PersistenceError
from recognition_engine.database import repositories
from recognition_engine.database.models import STATUS_ANNOUNCED
from recognition_engine.database.session import session_scope
from recognition_engine.recognition_logging import get_logger

logger = get_logger(__name__)


@dataclass
class ThemeOutcome:
    """Per-theme result of one calculation run, reported back to the caller."""

    theme_id: str
    theme_name: str
    success: bool
    nominee_count: int = 0
    theme_results_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "theme_id": self.theme_id,
            "theme_name": self.theme_name,
            "success": self.success,
            "nominee_count": self.nominee_count,
            "theme_results_id": self.theme_results_id,
            "error": self.error,
        }


class ResultsPublisher:
    """Persists computed themes; session_factory is swappable for tests."""

    def __init__(
        self,
        session_factory: Callable[[], AbstractContextManager[Session]] = session_scope,
    ) -> None:
        self._session_factory = session_factory

    def publish_theme(
        self,
        *,
        tenant_id: str,
        cycle_id: str,
        computation: ThemeComputation,
    ) -> ThemeOutcome:
        """
        Write one theme's result and rankings atomically.

        Raises PersistenceError when the transaction fails; nothing of the
        theme is written in that case.
        """
        try:
            with self._session_factory() as session:
                theme_results_id = repositories.upsert_theme_result(
                    session,
                    tenant_id=tenant_id,
                    cycle_id=cycle_id,
                    theme_id=computation.theme_id,
                    podium=computation.podium,
                    fairness_report=computation.fairness_report.to_dict(),
                    calculated_at=int(time.time()),
                )
                count = repositories.replace_nominee_rankings(
                    session,
                    theme_results_id=theme_results_id,
                    tenant_id=tenant_id,
                    ranking=computation.ranking,
                )
        except SQLAlchemyError as e:
            logger.exception(
                "theme_publish_failed",
                cycle_id=cycle_id,
                theme_id=computation.theme_id,
                error=str(e),
            )
            raise PersistenceError(
                f"Failed to publish results for theme {computation.theme_name}",
                theme_id=computation.theme_id,
            ) from e
        logger.info(
            "theme_published",
            cycle_id=cycle_id,
            theme_id=computation.theme_id,
            theme_results_id=theme_results_id,
            nominee_count=count,
        )
        return ThemeOutcome(
            theme_id=computation.theme_id,
            theme_name=computation.theme_name,
            success=True,
            nominee_count=count,
            theme_results_id=theme_results_id,
        )

    def advance_cycle(self, cycle_id: str, outcomes: list[ThemeOutcome]) -> bool:
        """
        Set the cycle to `announced` when every outcome succeeded.

        Returns False (status untouched) when any theme failed or no outcome exists.
        """
        if not outcomes or not all(o.success for o in outcomes):
            logger.warning(
                "cycle_not_advanced",
                cycle_id=cycle_id,
                failed_themes=[o.theme_id for o in outcomes if not o.success],
            )
            return False
        try:
            with self._session_factory() as session:
                repositories.set_cycle_status(session, cycle_id, STATUS_ANNOUNCED)
        except SQLAlchemyError as e:
            logger.exception("cycle_advance_failed", cycle_id=cycle_id, error=str(e))
            raise PersistenceError(f"Failed to announce cycle {cycle_id}") from e
        logger.info("cycle_announced", cycle_id=cycle_id, themes=len(outcomes))
        return True

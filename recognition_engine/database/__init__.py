"""
Database layer — SQLAlchemy models, session management, and repositories.

SQLite by default; PostgreSQL via DATABASE_URL.
"""

from recognition_engine.database.models import (
    AwardCycle,
    AwardTheme,
    Base,
    CycleCalculationLock,
    JudgingCriterion,
    Nomination,
    NomineeRanking,
    ThemeResult,
    Vote,
)
from recognition_engine.database.session import (
    get_engine,
    init_db,
    reset_engine_for_test,
    session_scope,
)

__all__ = [
    "AwardCycle",
    "AwardTheme",
    "Base",
    "CycleCalculationLock",
    "JudgingCriterion",
    "Nomination",
    "NomineeRanking",
    "ThemeResult",
    "Vote",
    "get_engine",
    "init_db",
    "reset_engine_for_test",
    "session_scope",
]

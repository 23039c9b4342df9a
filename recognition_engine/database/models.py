"""
SQLAlchemy models for recognition cycles and their calculated results.

Input tables (award_cycles, award_themes, judging_criteria, nominations, votes)
are owned by the surrounding application; this engine only reads them.
Output tables (theme_results, nominee_rankings) carry natural-key unique
constraints so re-running a cycle updates rows instead of duplicating them.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import (
    JSON,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

CYCLE_STATUSES = ("draft", "nominating", "voting", "calculating", "announced", "archived")
STATUS_ANNOUNCED = "announced"
APPEAL_STATUS_CLOSED = "closed"


def new_id() -> str:
    return str(uuid.uuid4())


# -----------------------------------------------------------------------------
# Input tables
# -----------------------------------------------------------------------------


class AwardCycle(Base):
    __tablename__ = "award_cycles"

    id = Column(String(64), primary_key=True, default=new_id)
    tenant_id = Column(String(64), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="draft")
    fairness_config = Column(JSON, nullable=True)  # {"clique_threshold": int, "visibility_bias": bool}
    deleted_at = Column(Integer, nullable=True)  # Unix timestamp


class AwardTheme(Base):
    __tablename__ = "award_themes"

    id = Column(String(64), primary_key=True, default=new_id)
    cycle_id = Column(String(64), nullable=False, index=True)
    name = Column(String(256), nullable=False)
    deleted_at = Column(Integer, nullable=True)


class JudgingCriterion(Base):
    __tablename__ = "judging_criteria"

    id = Column(String(64), primary_key=True, default=new_id)
    theme_id = Column(String(64), nullable=False, index=True)
    name = Column(String(256), nullable=True)
    weight = Column(Float, nullable=False, default=0.0)
    deleted_at = Column(Integer, nullable=True)


class Nomination(Base):
    __tablename__ = "nominations"

    id = Column(String(64), primary_key=True, default=new_id)
    theme_id = Column(String(64), nullable=False, index=True)
    nominee_id = Column(String(64), nullable=False, index=True)
    nominator_id = Column(String(64), nullable=True, index=True)
    status = Column(String(32), nullable=False, default="submitted", index=True)
    deleted_at = Column(Integer, nullable=True)


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nomination_id = Column(String(64), nullable=False, index=True)
    voter_id = Column(String(64), nullable=False, index=True)
    criteria_scores = Column(JSON, nullable=False, default=dict)  # {criterion_id: 1..5}


# -----------------------------------------------------------------------------
# Output tables
# -----------------------------------------------------------------------------


class ThemeResult(Base):
    """One row per (theme, cycle); upserted on every calculation run."""

    __tablename__ = "theme_results"
    __table_args__ = (UniqueConstraint("theme_id", "cycle_id", name="uq_theme_results_theme_cycle"),)

    id = Column(String(64), primary_key=True, default=new_id)
    tenant_id = Column(String(64), nullable=False, index=True)
    theme_id = Column(String(64), nullable=False, index=True)
    cycle_id = Column(String(64), nullable=False, index=True)
    first_place_nomination_id = Column(String(64), nullable=True)
    second_place_nomination_id = Column(String(64), nullable=True)
    third_place_nomination_id = Column(String(64), nullable=True)
    fairness_report = Column(JSON, nullable=False, default=dict)
    appeal_status = Column(String(32), nullable=False, default=APPEAL_STATUS_CLOSED)
    calculated_at = Column(Integer, nullable=True)
    published_at = Column(Integer, nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "theme_id": self.theme_id,
            "cycle_id": self.cycle_id,
            "first_place_nomination_id": self.first_place_nomination_id,
            "second_place_nomination_id": self.second_place_nomination_id,
            "third_place_nomination_id": self.third_place_nomination_id,
            "fairness_report": self.fairness_report or {},
            "appeal_status": self.appeal_status,
            "calculated_at": self.calculated_at,
            "published_at": self.published_at,
        }


class NomineeRanking(Base):
    """One row per nomination in a theme result; replaced as a set on every run."""

    __tablename__ = "nominee_rankings"
    __table_args__ = (
        UniqueConstraint("theme_results_id", "nomination_id", name="uq_nominee_rankings_result_nomination"),
        UniqueConstraint("theme_results_id", "rank", name="uq_nominee_rankings_result_rank"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    theme_results_id = Column(
        String(64), ForeignKey("theme_results.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nomination_id = Column(String(64), nullable=False, index=True)
    rank = Column(Integer, nullable=False)
    raw_average_score = Column(Float, nullable=False, default=0.0)
    weighted_average_score = Column(Float, nullable=False, default=0.0)
    criterion_breakdown = Column(JSON, nullable=False, default=dict)
    total_votes = Column(Integer, nullable=False, default=0)
    vote_distribution = Column(JSON, nullable=False, default=dict)
    confidence_interval = Column(JSON, nullable=False, default=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "theme_results_id": self.theme_results_id,
            "nomination_id": self.nomination_id,
            "rank": self.rank,
            "raw_average_score": self.raw_average_score,
            "weighted_average_score": self.weighted_average_score,
            "criterion_breakdown": self.criterion_breakdown or {},
            "total_votes": self.total_votes,
            "vote_distribution": self.vote_distribution or {},
            "confidence_interval": self.confidence_interval or {},
        }


class CycleCalculationLock(Base):
    """Advisory lock row: at most one calculation per cycle at a time."""

    __tablename__ = "cycle_calculation_locks"

    cycle_id = Column(String(64), primary_key=True)
    owner = Column(String(64), nullable=False)
    acquired_at = Column(Float, nullable=False)  # Unix timestamp

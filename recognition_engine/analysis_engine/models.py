"""
Value objects for the analysis engine.

Plain dataclasses loaded from a cycle snapshot; no ORM coupling, so every
computation in the engine is a pure function over these types.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

ELIGIBLE_NOMINATION_STATUSES = ("endorsed", "shortlisted")
SCORE_BUCKETS = ("1", "2", "3", "4", "5")
DEFAULT_CLIQUE_THRESHOLD = 3


def round2(value: float) -> float:
    """Round half up to 2 decimals; all engine scores are rounded where computed."""
    return math.floor(value * 100 + 0.5) / 100


@dataclass(frozen=True)
class CriterionSpec:
    """Weighted judging dimension of a theme."""

    id: str
    weight: float


@dataclass(frozen=True)
class NominationRecord:
    """Eligible nomination. nominator_id is None when the source row does not carry it."""

    id: str
    theme_id: str
    nominee_id: str
    nominator_id: str | None = None


@dataclass(frozen=True)
class VoteRecord:
    """One voter's per-criterion scores (1..5) for one nomination."""

    nomination_id: str
    voter_id: str
    criteria_scores: dict[str, int] = field(default_factory=dict)

    @property
    def scores(self) -> list[float]:
        return [s for s in self.criteria_scores.values() if s is not None]


@dataclass
class FairnessConfig:
    """Per-cycle fairness configuration (award_cycles.fairness_config)."""

    clique_threshold: int = DEFAULT_CLIQUE_THRESHOLD
    visibility_bias: bool = False

    @classmethod
    def from_dict(
        cls,
        raw: dict[str, Any] | None,
        default_clique_threshold: int = DEFAULT_CLIQUE_THRESHOLD,
    ) -> "FairnessConfig":
        raw = raw or {}
        threshold = raw.get("clique_threshold") or default_clique_threshold
        return cls(
            clique_threshold=max(1, int(threshold)),
            visibility_bias=bool(raw.get("visibility_bias", False)),
        )


@dataclass
class ThemeSnapshot:
    """Criteria, eligible nominations and votes of one theme."""

    id: str
    name: str
    criteria: list[CriterionSpec] = field(default_factory=list)
    nominations: list[NominationRecord] = field(default_factory=list)
    votes_by_nomination: dict[str, list[VoteRecord]] = field(default_factory=dict)

    def votes_for(self, nomination_id: str) -> list[VoteRecord]:
        return self.votes_by_nomination.get(nomination_id, [])


@dataclass
class CycleSnapshot:
    """Immutable input of one calculation run."""

    id: str
    tenant_id: str
    status: str
    fairness_config: FairnessConfig
    themes: list[ThemeSnapshot] = field(default_factory=list)

    @property
    def all_nominations(self) -> list[NominationRecord]:
        return [n for t in self.themes for n in t.nominations]


@dataclass
class CriterionBreakdown:
    """Average and contributing-vote count of one criterion."""

    avg: float
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"avg": self.avg, "count": self.count}


@dataclass
class NominationAggregate:
    """Output of vote aggregation for one nomination."""

    nomination_id: str
    raw_avg: float
    criterion_breakdown: dict[str, CriterionBreakdown]
    per_vote_averages: list[float]
    total_votes: int
    vote_distribution: dict[str, int]

    @classmethod
    def empty(cls, nomination_id: str, criteria: list[CriterionSpec]) -> "NominationAggregate":
        return cls(
            nomination_id=nomination_id,
            raw_avg=0.0,
            criterion_breakdown={c.id: CriterionBreakdown(avg=0.0, count=0) for c in criteria},
            per_vote_averages=[],
            total_votes=0,
            vote_distribution={b: 0 for b in SCORE_BUCKETS},
        )


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float

    def to_dict(self) -> dict[str, float]:
        return {"lower": self.lower, "upper": self.upper}


@dataclass
class ScoredNomination:
    """Aggregate plus weighted score and confidence interval."""

    aggregate: NominationAggregate
    weighted_avg: float
    confidence_interval: ConfidenceInterval

    @property
    def nomination_id(self) -> str:
        return self.aggregate.nomination_id


@dataclass
class RankedNomination:
    """One NomineeRanking row before persistence."""

    rank: int
    scored: ScoredNomination

    @property
    def nomination_id(self) -> str:
        return self.scored.nomination_id

    def to_row(self) -> dict[str, Any]:
        agg = self.scored.aggregate
        return {
            "nomination_id": agg.nomination_id,
            "rank": self.rank,
            "raw_average_score": agg.raw_avg,
            "weighted_average_score": self.scored.weighted_avg,
            "criterion_breakdown": {cid: b.to_dict() for cid, b in agg.criterion_breakdown.items()},
            "total_votes": agg.total_votes,
            "vote_distribution": dict(agg.vote_distribution),
            "confidence_interval": self.scored.confidence_interval.to_dict(),
        }

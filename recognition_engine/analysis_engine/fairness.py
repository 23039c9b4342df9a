"""
Rule-based fairness analysis for one theme.

Checks clique patterns among nominations, extreme-scoring voters, and the
per-nomination score distribution. Every signal is explainable: it carries the
rule that raised it and the counts behind it. No ML; thresholds come from the
cycle's fairness configuration.

Clique limitation: reciprocal detection (A nominates B and B nominates A)
needs the nominator on the nomination row. Nominations without a nominator
fall back to a nominee-pool heuristic, which cannot tell mutual nominations
from a popular nominee.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from recognition_engine.analysis_engine.aggregator import score_distribution
from recognition_engine.analysis_engine.models import (
    FairnessConfig,
    NominationRecord,
    ThemeSnapshot,
    VoteRecord,
)
from recognition_engine.recognition_logging import get_logger

logger = get_logger(__name__)

EXTREME_SCORES = frozenset({1, 5})
DEMOGRAPHIC_PARITY_NOTE = "Requires department/demographic data integration"
VISIBILITY_CORRECTION_METHOD = "remote_worker_boost"


class CliqueMethod(str, Enum):
    RECIPROCAL = "reciprocal"
    NOMINEE_POOL = "nominee_pool"


class AnomalyType(str, Enum):
    EXTREME_SCORING = "extreme_scoring"


@dataclass
class CliqueWarning:
    nomination_id: str
    mutual_count: int
    method: CliqueMethod
    nominator_id: str | None = None
    nominee_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nomination_id": self.nomination_id,
            "nominator_id": self.nominator_id,
            "nominee_id": self.nominee_id,
            "mutual_count": self.mutual_count,
            "method": self.method.value,
        }


@dataclass
class VoteAnomaly:
    nomination_id: str
    count: int
    """Number of offending voters on the nomination."""
    type: AnomalyType = AnomalyType.EXTREME_SCORING

    def to_dict(self) -> dict[str, Any]:
        return {
            "nomination_id": self.nomination_id,
            "type": self.type.value,
            "count": self.count,
        }


@dataclass
class FairnessReport:
    """Structured diagnostics stored as theme_results.fairness_report."""

    clique_warnings: list[CliqueWarning] = field(default_factory=list)
    anomalies: list[VoteAnomaly] = field(default_factory=list)
    vote_distribution: dict[str, dict[str, int]] = field(default_factory=dict)
    visibility_bias: bool = False

    @property
    def is_flagged(self) -> bool:
        return bool(self.clique_warnings or self.anomalies)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "clique_warnings": [w.to_dict() for w in self.clique_warnings],
            "anomalies": [a.to_dict() for a in self.anomalies],
            "vote_distribution": self.vote_distribution,
            "demographic_parity": {
                "status": "not_evaluated",
                "note": DEMOGRAPHIC_PARITY_NOTE,
            },
        }
        if self.visibility_bias:
            out["visibility_correction"] = {
                "applied": True,
                "method": VISIBILITY_CORRECTION_METHOD,
            }
        return out


def is_extreme_vote(vote: VoteRecord) -> bool:
    """True when every score of the vote is 1, or every score is 5. Mixed 1/5 votes are not extreme."""
    distinct = set(vote.scores)
    return len(distinct) == 1 and distinct <= EXTREME_SCORES


def detect_cliques(
    theme_nominations: list[NominationRecord],
    cycle_nominations: list[NominationRecord],
    threshold: int,
) -> list[CliqueWarning]:
    """
    Reciprocal edges on the nominator→nominee graph, plus the nominee-pool fallback.

    Reciprocal warnings are reported only when at least `threshold` of them
    exist in the theme. A nomination without nominator is flagged when
    `threshold` or more other nominations in the theme share its nominee.
    """
    edges = Counter(
        (n.nominator_id, n.nominee_id)
        for n in cycle_nominations
        if n.nominator_id and n.nominator_id != n.nominee_id
    )
    nominee_pool = Counter(n.nominee_id for n in theme_nominations)

    reciprocal: list[CliqueWarning] = []
    pool: list[CliqueWarning] = []
    for nom in theme_nominations:
        if nom.nominator_id:
            mutual = edges.get((nom.nominee_id, nom.nominator_id), 0)
            if mutual > 0:
                reciprocal.append(
                    CliqueWarning(
                        nomination_id=nom.id,
                        nominator_id=nom.nominator_id,
                        nominee_id=nom.nominee_id,
                        mutual_count=mutual,
                        method=CliqueMethod.RECIPROCAL,
                    )
                )
            continue
        others = nominee_pool[nom.nominee_id] - 1
        if others >= threshold:
            pool.append(
                CliqueWarning(
                    nomination_id=nom.id,
                    nominee_id=nom.nominee_id,
                    mutual_count=others,
                    method=CliqueMethod.NOMINEE_POOL,
                )
            )
    if len(reciprocal) < threshold:
        reciprocal = []
    return reciprocal + pool


def detect_vote_anomalies(theme: ThemeSnapshot) -> list[VoteAnomaly]:
    anomalies: list[VoteAnomaly] = []
    for nom in theme.nominations:
        extreme = sum(1 for v in theme.votes_for(nom.id) if is_extreme_vote(v))
        if extreme > 0:
            anomalies.append(VoteAnomaly(nomination_id=nom.id, count=extreme))
    return anomalies


def analyze_fairness(
    theme: ThemeSnapshot,
    config: FairnessConfig,
    cycle_nominations: list[NominationRecord] | None = None,
) -> FairnessReport:
    """
    Run all fairness checks for one theme.

    Args:
        theme: Theme snapshot with its eligible nominations and votes.
        config: Cycle fairness configuration (clique threshold, visibility bias).
        cycle_nominations: Eligible nominations of the whole cycle, used for
            reciprocal edges that cross themes; defaults to the theme's own.

    Returns:
        FairnessReport; to_dict() is the persisted fairness_report.
    """
    report = FairnessReport(
        clique_warnings=detect_cliques(
            theme.nominations,
            cycle_nominations if cycle_nominations is not None else theme.nominations,
            config.clique_threshold,
        ),
        anomalies=detect_vote_anomalies(theme),
        vote_distribution={
            nom.id: score_distribution(theme.votes_for(nom.id)) for nom in theme.nominations
        },
        visibility_bias=config.visibility_bias,
    )
    if report.is_flagged:
        logger.warning(
            "fairness_signals_detected",
            theme_id=theme.id,
            clique_warnings=len(report.clique_warnings),
            anomalies=len(report.anomalies),
        )
    return report

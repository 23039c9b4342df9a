"""
Vote aggregation — per-criterion and raw averages for one nomination.

Missing criterion scores are excluded from that criterion's average (never
treated as zero). A nomination without votes yields an explicit zero record so
downstream ranking places it last instead of dropping it.
"""

from __future__ import annotations

from statistics import fmean
from typing import Iterable

from recognition_engine.analysis_engine.models import (
    SCORE_BUCKETS,
    CriterionBreakdown,
    CriterionSpec,
    NominationAggregate,
    VoteRecord,
    round2,
)


def vote_average(vote: VoteRecord) -> float:
    """Mean of all scores present in one vote; 0 for an empty vote."""
    scores = vote.scores
    return fmean(scores) if scores else 0.0


def score_distribution(votes: Iterable[VoteRecord]) -> dict[str, int]:
    """Histogram over buckets 1..5 of every individual criterion score."""
    distribution = {b: 0 for b in SCORE_BUCKETS}
    for vote in votes:
        for score in vote.scores:
            key = str(int(score + 0.5))
            if key in distribution:
                distribution[key] += 1
    return distribution


def aggregate_votes(
    nomination_id: str,
    votes: list[VoteRecord],
    criteria: list[CriterionSpec],
) -> NominationAggregate:
    """
    Aggregate all votes of one nomination.

    Args:
        nomination_id: Nomination the votes belong to.
        votes: Every vote cast for the nomination (any order).
        criteria: The theme's criteria; breakdown has one entry per criterion.

    Returns:
        NominationAggregate with criterion averages and raw_avg rounded to 2 decimals.
        per_vote_averages stay unrounded for dispersion estimates.
    """
    if not votes:
        return NominationAggregate.empty(nomination_id, criteria)

    breakdown: dict[str, CriterionBreakdown] = {}
    for criterion in criteria:
        scores = [
            v.criteria_scores[criterion.id]
            for v in votes
            if v.criteria_scores.get(criterion.id) is not None
        ]
        avg = fmean(scores) if scores else 0.0
        breakdown[criterion.id] = CriterionBreakdown(avg=round2(avg), count=len(scores))

    per_vote = [vote_average(v) for v in votes]
    return NominationAggregate(
        nomination_id=nomination_id,
        raw_avg=round2(fmean(per_vote)),
        criterion_breakdown=breakdown,
        per_vote_averages=per_vote,
        total_votes=len(votes),
        vote_distribution=score_distribution(votes),
    )

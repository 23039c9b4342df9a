"""
Weighted composite score from per-criterion averages.

Criterion weights are theme-defined and need not sum to 100. When every
weight is zero the fixed FALLBACK_TOTAL_WEIGHT is used as denominator, which
makes the weighted score 0.
"""

from __future__ import annotations

from recognition_engine.analysis_engine.models import (
    CriterionSpec,
    NominationAggregate,
    round2,
)
from recognition_engine.core.exceptions import DataIntegrityError

FALLBACK_TOTAL_WEIGHT = 100.0


def total_weight(criteria: list[CriterionSpec]) -> float:
    """Sum of criterion weights, or FALLBACK_TOTAL_WEIGHT when the sum is 0."""
    for c in criteria:
        if c.weight < 0:
            raise DataIntegrityError(f"Criterion {c.id} has negative weight {c.weight}")
    total = sum(c.weight for c in criteria)
    return total if total > 0 else FALLBACK_TOTAL_WEIGHT


def weighted_average(aggregate: NominationAggregate, criteria: list[CriterionSpec]) -> float:
    """
    Σ(criterion_avg × weight) / Σweight, rounded to 2 decimals.

    Criteria missing from the breakdown contribute 0.
    """
    denominator = total_weight(criteria)
    weighted = 0.0
    for c in criteria:
        breakdown = aggregate.criterion_breakdown.get(c.id)
        if breakdown is not None:
            weighted += breakdown.avg * c.weight
    return round2(weighted / denominator)

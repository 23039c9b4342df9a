"""
Confidence interval around the weighted score.

Approximation: the margin comes from the dispersion of the *unweighted*
per-vote averages and is applied around the *weighted* mean. This is not a
rigorous interval on a weighted statistic; a stricter estimate would derive
dispersion from weighted per-vote scores.
"""

from __future__ import annotations

import math

from recognition_engine.analysis_engine.models import ConfidenceInterval, round2

Z_95 = 1.96


def sample_stddev(values: list[float]) -> float:
    """Sample standard deviation with denominator max(n - 1, 1); 0 for n <= 1."""
    n = len(values)
    if n <= 1:
        return 0.0
    mean = sum(values) / n
    return math.sqrt(sum((v - mean) ** 2 for v in values) / max(n - 1, 1))


def margin_of_error(per_vote_averages: list[float]) -> float:
    n = len(per_vote_averages)
    if n <= 1:
        return 0.0
    return Z_95 * sample_stddev(per_vote_averages) / math.sqrt(n)


def confidence_interval(per_vote_averages: list[float], weighted_avg: float) -> ConfidenceInterval:
    """[weighted_avg - margin, weighted_avg + margin], bounds rounded to 2 decimals."""
    margin = margin_of_error(per_vote_averages)
    return ConfidenceInterval(
        lower=round2(weighted_avg - margin),
        upper=round2(weighted_avg + margin),
    )

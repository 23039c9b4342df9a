"""
Tests for vote aggregation, weighted scoring and confidence intervals.

Pure functions; no database.
"""

from __future__ import annotations

import pytest

from recognition_engine.analysis_engine.aggregator import aggregate_votes, score_distribution, vote_average
from recognition_engine.analysis_engine.confidence import confidence_interval, margin_of_error, sample_stddev
from recognition_engine.analysis_engine.models import CriterionSpec, VoteRecord, round2
from recognition_engine.analysis_engine.scorer import FALLBACK_TOTAL_WEIGHT, total_weight, weighted_average
from recognition_engine.core.exceptions import DataIntegrityError

CRITERIA_60_40 = [CriterionSpec("c1", 60), CriterionSpec("c2", 40)]


def _vote(voter: str, **scores: int) -> VoteRecord:
    return VoteRecord(nomination_id="x", voter_id=voter, criteria_scores=scores)


# --- Vote aggregation ---


def test_weighted_average_scenario_a():
    """Weights 60/40, votes {5,3} and {4,4}: c1=4.5, c2=3.5, weighted 4.10."""
    agg = aggregate_votes("x", [_vote("v1", c1=5, c2=3), _vote("v2", c1=4, c2=4)], CRITERIA_60_40)
    assert agg.criterion_breakdown["c1"].avg == 4.5
    assert agg.criterion_breakdown["c2"].avg == 3.5
    assert agg.criterion_breakdown["c1"].count == 2
    assert agg.raw_avg == 4.0
    assert agg.total_votes == 2
    assert weighted_average(agg, CRITERIA_60_40) == pytest.approx(4.10)


def test_missing_criterion_excluded_not_zero():
    """A vote without c2 does not pull c2's average down."""
    agg = aggregate_votes("x", [_vote("v1", c1=2, c2=4), _vote("v2", c1=4)], CRITERIA_60_40)
    assert agg.criterion_breakdown["c1"].avg == 3.0
    assert agg.criterion_breakdown["c2"].avg == 4.0
    assert agg.criterion_breakdown["c2"].count == 1
    # per-vote raw averages: 3.0 and 4.0
    assert agg.raw_avg == 3.5


def test_criterion_average_independent_of_vote_order():
    votes = [_vote("v1", c1=5, c2=1), _vote("v2", c1=2, c2=3), _vote("v3", c1=4, c2=4)]
    forward = aggregate_votes("x", votes, CRITERIA_60_40)
    backward = aggregate_votes("x", list(reversed(votes)), CRITERIA_60_40)
    for cid in ("c1", "c2"):
        assert forward.criterion_breakdown[cid].avg == backward.criterion_breakdown[cid].avg
    assert forward.criterion_breakdown["c1"].avg == pytest.approx(11 / 3, abs=0.01)
    assert weighted_average(forward, CRITERIA_60_40) == weighted_average(backward, CRITERIA_60_40)


def test_zero_votes_explicit_zero_record():
    agg = aggregate_votes("x", [], CRITERIA_60_40)
    assert agg is not None
    assert agg.raw_avg == 0
    assert agg.total_votes == 0
    assert {cid: b.avg for cid, b in agg.criterion_breakdown.items()} == {"c1": 0.0, "c2": 0.0}
    assert agg.vote_distribution == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    assert weighted_average(agg, CRITERIA_60_40) == 0
    ci = confidence_interval(agg.per_vote_averages, 0.0)
    assert (ci.lower, ci.upper) == (0, 0)


def test_vote_distribution_counts_every_raw_score():
    votes = [_vote("v1", c1=5, c2=3), _vote("v2", c1=5, c2=1), _vote("v3", c1=9)]
    assert score_distribution(votes) == {"1": 1, "2": 0, "3": 1, "4": 0, "5": 2}


def test_empty_vote_average_is_zero():
    assert vote_average(_vote("v1")) == 0.0


# --- Weighted scorer ---


def test_weights_need_not_sum_to_100():
    criteria = [CriterionSpec("c1", 3), CriterionSpec("c2", 1)]
    agg = aggregate_votes("x", [_vote("v1", c1=4, c2=2)], criteria)
    # (4*3 + 2*1) / 4 = 3.5
    assert weighted_average(agg, criteria) == 3.5


def test_zero_total_weight_uses_fallback():
    criteria = [CriterionSpec("c1", 0), CriterionSpec("c2", 0)]
    assert total_weight(criteria) == FALLBACK_TOTAL_WEIGHT
    agg = aggregate_votes("x", [_vote("v1", c1=5, c2=5)], criteria)
    assert weighted_average(agg, criteria) == 0.0


def test_negative_weight_rejected():
    with pytest.raises(DataIntegrityError, match="negative weight"):
        total_weight([CriterionSpec("c1", -1)])


def test_round2_half_up():
    assert round2(0.125) == 0.13
    assert round2(2.675000001) == 2.68
    assert round2(1 / 3) == 0.33


# --- Confidence interval ---


def test_single_vote_has_zero_margin():
    agg = aggregate_votes("x", [_vote("v1", c1=5, c2=3)], CRITERIA_60_40)
    weighted = weighted_average(agg, CRITERIA_60_40)
    ci = confidence_interval(agg.per_vote_averages, weighted)
    assert ci.lower == ci.upper == weighted


def test_margin_from_unweighted_dispersion():
    """Per-vote averages 5 and 1: stddev 2.83, margin 1.96*2.83/sqrt(2) = 3.92."""
    per_vote = [5.0, 1.0]
    assert sample_stddev(per_vote) == pytest.approx(2.8284, abs=1e-3)
    assert margin_of_error(per_vote) == pytest.approx(3.92, abs=1e-6)
    ci = confidence_interval(per_vote, 3.0)
    assert ci.lower == pytest.approx(-0.92)
    assert ci.upper == pytest.approx(6.92)
    assert ci.to_dict() == {"lower": ci.lower, "upper": ci.upper}


def test_identical_votes_zero_margin():
    assert margin_of_error([4.0, 4.0, 4.0]) == 0.0

"""
Tests for rule-based fairness analysis: cliques, extreme scoring, distribution, stubs.
"""

from __future__ import annotations

from recognition_engine.analysis_engine.fairness import (
    CliqueMethod,
    analyze_fairness,
    detect_cliques,
    is_extreme_vote,
)
from recognition_engine.analysis_engine.models import (
    CriterionSpec,
    FairnessConfig,
    NominationRecord,
    ThemeSnapshot,
    VoteRecord,
)


def _nom(nid: str, nominee: str, nominator: str | None = None, theme: str = "t1") -> NominationRecord:
    return NominationRecord(id=nid, theme_id=theme, nominee_id=nominee, nominator_id=nominator)


def _vote(nid: str, voter: str, **scores: int) -> VoteRecord:
    return VoteRecord(nomination_id=nid, voter_id=voter, criteria_scores=scores)


# --- Extreme scoring (Scenario B) ---


def test_all_low_vote_is_extreme():
    assert is_extreme_vote(_vote("n1", "v1", c1=1, c2=1)) is True


def test_all_high_vote_is_extreme():
    assert is_extreme_vote(_vote("n1", "v1", c1=5, c2=5, c3=5)) is True


def test_mixed_low_high_vote_is_not_extreme():
    assert is_extreme_vote(_vote("n1", "v1", c1=1, c2=5)) is False


def test_moderate_or_empty_vote_is_not_extreme():
    assert is_extreme_vote(_vote("n1", "v1", c1=3, c2=3)) is False
    assert is_extreme_vote(_vote("n1", "v1")) is False


def test_anomalies_count_offending_voters_per_nomination():
    theme = ThemeSnapshot(
        id="t1",
        name="Innovation",
        criteria=[CriterionSpec("c1", 50), CriterionSpec("c2", 50)],
        nominations=[_nom("n1", "e1"), _nom("n2", "e2")],
        votes_by_nomination={
            "n1": [_vote("n1", "v1", c1=1, c2=1), _vote("n1", "v2", c1=5, c2=5), _vote("n1", "v3", c1=1, c2=5)],
            "n2": [_vote("n2", "v1", c1=3, c2=4)],
        },
    )
    report = analyze_fairness(theme, FairnessConfig()).to_dict()
    assert report["anomalies"] == [{"nomination_id": "n1", "type": "extreme_scoring", "count": 2}]
    assert report["vote_distribution"]["n1"] == {"1": 3, "2": 0, "3": 0, "4": 0, "5": 3}
    assert report["vote_distribution"]["n2"] == {"1": 0, "2": 0, "3": 1, "4": 1, "5": 0}


# --- Cliques ---


def test_reciprocal_cliques_reported_at_threshold():
    """A→B, B→A, C→D, D→C: four reciprocal nominations; threshold 3 reports them."""
    noms = [
        _nom("n1", "B", "A"),
        _nom("n2", "A", "B"),
        _nom("n3", "D", "C"),
        _nom("n4", "C", "D"),
        _nom("n5", "E", "A"),
    ]
    warnings = detect_cliques(noms, noms, threshold=3)
    assert [w.nomination_id for w in warnings] == ["n1", "n2", "n3", "n4"]
    assert all(w.method is CliqueMethod.RECIPROCAL for w in warnings)
    assert warnings[0].to_dict() == {
        "nomination_id": "n1",
        "nominator_id": "A",
        "nominee_id": "B",
        "mutual_count": 1,
        "method": "reciprocal",
    }


def test_reciprocal_cliques_below_threshold_not_reported():
    noms = [_nom("n1", "B", "A"), _nom("n2", "A", "B")]
    assert detect_cliques(noms, noms, threshold=3) == []
    assert len(detect_cliques(noms, noms, threshold=2)) == 2


def test_reciprocal_edge_across_themes_uses_cycle_nominations():
    theme_noms = [_nom("n1", "B", "A", theme="t1")]
    cycle_noms = theme_noms + [_nom("n9", "A", "B", theme="t2")]
    warnings = detect_cliques(theme_noms, cycle_noms, threshold=1)
    assert [(w.nomination_id, w.mutual_count) for w in warnings] == [("n1", 1)]


def test_self_nomination_is_not_reciprocal():
    noms = [_nom("n1", "A", "A")]
    assert detect_cliques(noms, noms, threshold=1) == []


def test_nominee_pool_fallback_without_nominator():
    """Four nominations of the same nominee with no nominator: each has 3 others, threshold 3 flags all."""
    noms = [_nom(f"n{i}", "X") for i in range(4)] + [_nom("n9", "Y")]
    warnings = detect_cliques(noms, noms, threshold=3)
    assert sorted(w.nomination_id for w in warnings) == ["n0", "n1", "n2", "n3"]
    assert all(w.mutual_count == 3 and w.method is CliqueMethod.NOMINEE_POOL for w in warnings)
    assert detect_cliques(noms, noms, threshold=4) == []


# --- Report contract ---


def test_report_contains_parity_stub_and_visibility_marker():
    theme = ThemeSnapshot(id="t1", name="Innovation", nominations=[_nom("n1", "e1")])
    report = analyze_fairness(theme, FairnessConfig(visibility_bias=True)).to_dict()
    assert report["demographic_parity"]["status"] == "not_evaluated"
    assert report["visibility_correction"] == {"applied": True, "method": "remote_worker_boost"}
    assert report["clique_warnings"] == []
    assert report["anomalies"] == []


def test_visibility_marker_absent_when_not_configured():
    theme = ThemeSnapshot(id="t1", name="Innovation", nominations=[_nom("n1", "e1")])
    report = analyze_fairness(theme, FairnessConfig()).to_dict()
    assert "visibility_correction" not in report


def test_fairness_config_from_dict_defaults():
    assert FairnessConfig.from_dict(None).clique_threshold == 3
    cfg = FairnessConfig.from_dict({"clique_threshold": 5, "visibility_bias": True})
    assert cfg.clique_threshold == 5
    assert cfg.visibility_bias is True
    assert FairnessConfig.from_dict({}, default_clique_threshold=4).clique_threshold == 4

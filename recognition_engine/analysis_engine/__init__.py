"""
Analysis engine package — vote aggregation, weighted scoring, and fairness analysis.

Pure functions over a loaded cycle snapshot: no database or HTTP access here.
"""

from recognition_engine.analysis_engine.aggregator import aggregate_votes
from recognition_engine.analysis_engine.confidence import confidence_interval
from recognition_engine.analysis_engine.fairness import (
    CliqueWarning,
    FairnessReport,
    VoteAnomaly,
    analyze_fairness,
)
from recognition_engine.analysis_engine.models import (
    ConfidenceInterval,
    CriterionSpec,
    CycleSnapshot,
    FairnessConfig,
    NominationAggregate,
    NominationRecord,
    RankedNomination,
    ScoredNomination,
    ThemeSnapshot,
    VoteRecord,
)
from recognition_engine.analysis_engine.pipeline import ThemeComputation, compute_theme
from recognition_engine.analysis_engine.ranking import assemble_ranking, podium
from recognition_engine.analysis_engine.scorer import FALLBACK_TOTAL_WEIGHT, weighted_average

__all__ = [
    "aggregate_votes",
    "confidence_interval",
    "CliqueWarning",
    "FairnessReport",
    "VoteAnomaly",
    "analyze_fairness",
    "ConfidenceInterval",
    "CriterionSpec",
    "CycleSnapshot",
    "FairnessConfig",
    "NominationAggregate",
    "NominationRecord",
    "RankedNomination",
    "ScoredNomination",
    "ThemeSnapshot",
    "VoteRecord",
    "ThemeComputation",
    "compute_theme",
    "assemble_ranking",
    "podium",
    "FALLBACK_TOTAL_WEIGHT",
    "weighted_average",
]

"""
Per-theme calculation pipeline.

aggregate → weighted score → confidence interval, fairness analysis → ranking.
Pure function over a ThemeSnapshot; safe to run in parallel across themes.
"""

from __future__ import annotations

from dataclasses import dataclass

from recognition_engine.analysis_engine.aggregator import aggregate_votes
from recognition_engine.analysis_engine.confidence import confidence_interval
from recognition_engine.analysis_engine.fairness import FairnessReport, analyze_fairness
from recognition_engine.analysis_engine.models import (
    FairnessConfig,
    NominationRecord,
    RankedNomination,
    ScoredNomination,
    ThemeSnapshot,
)
from recognition_engine.analysis_engine.ranking import assemble_ranking, podium
from recognition_engine.analysis_engine.scorer import weighted_average


@dataclass
class ThemeComputation:
    """Everything the publisher writes for one theme."""

    theme_id: str
    theme_name: str
    ranking: list[RankedNomination]
    fairness_report: FairnessReport

    @property
    def podium(self) -> tuple[str | None, str | None, str | None]:
        return podium(self.ranking)


def score_nominations(theme: ThemeSnapshot) -> list[ScoredNomination]:
    scored: list[ScoredNomination] = []
    for nom in theme.nominations:
        aggregate = aggregate_votes(nom.id, theme.votes_for(nom.id), theme.criteria)
        weighted = weighted_average(aggregate, theme.criteria)
        scored.append(
            ScoredNomination(
                aggregate=aggregate,
                weighted_avg=weighted,
                confidence_interval=confidence_interval(aggregate.per_vote_averages, weighted),
            )
        )
    return scored


def compute_theme(
    theme: ThemeSnapshot,
    config: FairnessConfig,
    cycle_nominations: list[NominationRecord] | None = None,
) -> ThemeComputation:
    return ThemeComputation(
        theme_id=theme.id,
        theme_name=theme.name,
        ranking=assemble_ranking(score_nominations(theme)),
        fairness_report=analyze_fairness(theme, config, cycle_nominations),
    )

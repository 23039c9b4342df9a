"""
Deterministic ranking of scored nominations within a theme.

Order: weighted_avg descending, then nomination_id ascending. Ranks are
1..N, contiguous and unique.
"""

from __future__ import annotations

from recognition_engine.analysis_engine.models import RankedNomination, ScoredNomination

PODIUM_SIZE = 3


def ranking_key(scored: ScoredNomination) -> tuple[float, str]:
    return (-scored.weighted_avg, scored.nomination_id)


def assemble_ranking(scored: list[ScoredNomination]) -> list[RankedNomination]:
    ordered = sorted(scored, key=ranking_key)
    return [RankedNomination(rank=i + 1, scored=s) for i, s in enumerate(ordered)]


def podium(ranking: list[RankedNomination]) -> tuple[str | None, str | None, str | None]:
    """First, second and third place nomination ids; None where the theme has fewer nominations."""
    ids: list[str | None] = [r.nomination_id for r in ranking[:PODIUM_SIZE]]
    ids += [None] * (PODIUM_SIZE - len(ids))
    return ids[0], ids[1], ids[2]

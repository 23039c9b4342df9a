"""
Repository functions over the recognition tables.

Every function takes an open Session so callers decide transaction
boundaries (see session.session_scope). Reads return analysis_engine value
objects; writes use natural keys so repeated runs are idempotent.
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from recognition_engine.analysis_engine.models import (
    ELIGIBLE_NOMINATION_STATUSES,
    CriterionSpec,
    CycleSnapshot,
    FairnessConfig,
    NominationRecord,
    RankedNomination,
    ThemeSnapshot,
    VoteRecord,
)
from recognition_engine.core.exceptions import (
    ConfigurationError,
    CycleLockedError,
    DataIntegrityError,
)
from recognition_engine.database.models import (
    APPEAL_STATUS_CLOSED,
    AwardCycle,
    AwardTheme,
    CycleCalculationLock,
    JudgingCriterion,
    Nomination,
    NomineeRanking,
    ThemeResult,
    Vote,
    new_id,
)
from recognition_engine.recognition_logging import get_logger

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


# -----------------------------------------------------------------------------
# Snapshot loading
# -----------------------------------------------------------------------------


def get_cycle(session: Session, cycle_id: str) -> AwardCycle:
    cycle = session.get(AwardCycle, cycle_id)
    if cycle is None or cycle.deleted_at is not None:
        raise ConfigurationError(f"Cycle {cycle_id} not found")
    return cycle


def _vote_record(row: Vote) -> VoteRecord:
    scores = {str(k): v for k, v in (row.criteria_scores or {}).items()}
    return VoteRecord(nomination_id=row.nomination_id, voter_id=row.voter_id, criteria_scores=scores)


def load_cycle_snapshot(
    session: Session,
    cycle_id: str,
    *,
    default_clique_threshold: int = 3,
) -> CycleSnapshot:
    """
    Load themes, eligible nominations, votes and criteria of a cycle.

    Raises ConfigurationError when the cycle does not exist, DataIntegrityError
    when it has no themes or no eligible nominations.
    """
    cycle = get_cycle(session, cycle_id)

    themes = session.execute(
        select(AwardTheme)
        .where(AwardTheme.cycle_id == cycle_id, AwardTheme.deleted_at.is_(None))
        .order_by(AwardTheme.id)
    ).scalars().all()
    if not themes:
        raise DataIntegrityError("No themes found")
    theme_ids = [t.id for t in themes]

    nominations = session.execute(
        select(Nomination)
        .where(
            Nomination.theme_id.in_(theme_ids),
            Nomination.status.in_(ELIGIBLE_NOMINATION_STATUSES),
            Nomination.deleted_at.is_(None),
        )
        .order_by(Nomination.id)
    ).scalars().all()
    if not nominations:
        raise DataIntegrityError("No eligible nominations")

    votes = session.execute(
        select(Vote)
        .where(Vote.nomination_id.in_([n.id for n in nominations]))
        .order_by(Vote.id)
    ).scalars().all()

    criteria = session.execute(
        select(JudgingCriterion)
        .where(JudgingCriterion.theme_id.in_(theme_ids), JudgingCriterion.deleted_at.is_(None))
        .order_by(JudgingCriterion.id)
    ).scalars().all()

    criteria_by_theme: dict[str, list[CriterionSpec]] = defaultdict(list)
    for c in criteria:
        criteria_by_theme[c.theme_id].append(CriterionSpec(id=c.id, weight=float(c.weight or 0.0)))

    nominations_by_theme: dict[str, list[NominationRecord]] = defaultdict(list)
    for n in nominations:
        nominations_by_theme[n.theme_id].append(
            NominationRecord(
                id=n.id,
                theme_id=n.theme_id,
                nominee_id=n.nominee_id,
                nominator_id=n.nominator_id,
            )
        )

    votes_by_nomination: dict[str, list[VoteRecord]] = defaultdict(list)
    for v in votes:
        votes_by_nomination[v.nomination_id].append(_vote_record(v))

    snapshot = CycleSnapshot(
        id=cycle.id,
        tenant_id=cycle.tenant_id,
        status=cycle.status,
        fairness_config=FairnessConfig.from_dict(cycle.fairness_config, default_clique_threshold),
        themes=[
            ThemeSnapshot(
                id=t.id,
                name=t.name,
                criteria=criteria_by_theme.get(t.id, []),
                nominations=nominations_by_theme.get(t.id, []),
                votes_by_nomination={
                    n.id: votes_by_nomination.get(n.id, []) for n in nominations_by_theme.get(t.id, [])
                },
            )
            for t in themes
        ],
    )
    logger.info(
        "cycle_snapshot_loaded",
        cycle_id=cycle_id,
        themes=len(themes),
        nominations=len(nominations),
        votes=len(votes),
        criteria=len(criteria),
    )
    return snapshot


# -----------------------------------------------------------------------------
# Result writes
# -----------------------------------------------------------------------------


def upsert_theme_result(
    session: Session,
    *,
    tenant_id: str,
    cycle_id: str,
    theme_id: str,
    podium: tuple[str | None, str | None, str | None],
    fairness_report: dict[str, Any],
    calculated_at: int | None = None,
) -> str:
    """
    Insert or update the theme result keyed by (theme_id, cycle_id). Returns its id.

    Recalculation clears published_at: changed results must be published again.
    """
    now = calculated_at if calculated_at is not None else int(time.time())
    values = {
        "tenant_id": tenant_id,
        "first_place_nomination_id": podium[0],
        "second_place_nomination_id": podium[1],
        "third_place_nomination_id": podium[2],
        "fairness_report": fairness_report,
        "appeal_status": APPEAL_STATUS_CLOSED,
        "calculated_at": now,
        "published_at": None,
    }
    insert_fn = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
    if insert_fn is not None:
        stmt = insert_fn(ThemeResult.__table__).values(
            id=new_id(),
            theme_id=theme_id,
            cycle_id=cycle_id,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["theme_id", "cycle_id"],
            set_={k: stmt.excluded[k] for k in values},
        )
        session.execute(stmt)
        return session.execute(
            select(ThemeResult.id).where(ThemeResult.theme_id == theme_id, ThemeResult.cycle_id == cycle_id)
        ).scalar_one()

    row = session.execute(
        select(ThemeResult).where(ThemeResult.theme_id == theme_id, ThemeResult.cycle_id == cycle_id)
    ).scalar_one_or_none()
    if row is None:
        row = ThemeResult(theme_id=theme_id, cycle_id=cycle_id, **values)
        session.add(row)
    else:
        for key, value in values.items():
            setattr(row, key, value)
    session.flush()
    return row.id


def replace_nominee_rankings(
    session: Session,
    *,
    theme_results_id: str,
    tenant_id: str,
    ranking: list[RankedNomination],
) -> int:
    """Delete every ranking row of the theme result, then insert the new set. Returns rows inserted."""
    session.execute(delete(NomineeRanking).where(NomineeRanking.theme_results_id == theme_results_id))
    session.add_all(
        NomineeRanking(theme_results_id=theme_results_id, tenant_id=tenant_id, **r.to_row())
        for r in ranking
    )
    session.flush()
    return len(ranking)


def set_cycle_status(session: Session, cycle_id: str, status: str) -> None:
    session.execute(update(AwardCycle).where(AwardCycle.id == cycle_id).values(status=status))


# -----------------------------------------------------------------------------
# Per-cycle advisory lock
# -----------------------------------------------------------------------------


def acquire_cycle_lock(session: Session, cycle_id: str, owner: str, *, ttl_sec: float) -> None:
    """
    Take the calculation lock of a cycle. A lock older than ttl_sec is stale and taken over.

    Raises CycleLockedError when another run holds a live lock.
    """
    now = time.time()
    existing = session.get(CycleCalculationLock, cycle_id)
    if existing is None:
        session.add(CycleCalculationLock(cycle_id=cycle_id, owner=owner, acquired_at=now))
        try:
            session.flush()
        except IntegrityError as e:
            raise CycleLockedError(f"Cycle {cycle_id} is already being calculated") from e
        return
    if now - existing.acquired_at < ttl_sec:
        raise CycleLockedError(f"Cycle {cycle_id} is already being calculated")
    taken = session.execute(
        update(CycleCalculationLock)
        .where(
            CycleCalculationLock.cycle_id == cycle_id,
            CycleCalculationLock.acquired_at == existing.acquired_at,
        )
        .values(owner=owner, acquired_at=now)
    ).rowcount
    if taken != 1:
        raise CycleLockedError(f"Cycle {cycle_id} is already being calculated")
    logger.warning("cycle_lock_stale_taken_over", cycle_id=cycle_id, previous_owner=existing.owner)


def release_cycle_lock(session: Session, cycle_id: str, owner: str) -> None:
    session.execute(
        delete(CycleCalculationLock).where(
            CycleCalculationLock.cycle_id == cycle_id,
            CycleCalculationLock.owner == owner,
        )
    )


# -----------------------------------------------------------------------------
# Result reads
# -----------------------------------------------------------------------------


def list_cycle_results(session: Session, cycle_id: str) -> list[dict[str, Any]]:
    """Theme results of a cycle, each with its rankings ordered by rank."""
    results = session.execute(
        select(ThemeResult).where(ThemeResult.cycle_id == cycle_id).order_by(ThemeResult.theme_id)
    ).scalars().all()
    out: list[dict[str, Any]] = []
    for result in results:
        rankings = session.execute(
            select(NomineeRanking)
            .where(NomineeRanking.theme_results_id == result.id)
            .order_by(NomineeRanking.rank)
        ).scalars().all()
        item = result.to_dict()
        item["rankings"] = [r.to_dict() for r in rankings]
        out.append(item)
    return out


def mark_theme_result_published(
    session: Session,
    theme_result_id: str,
    published_at: int | None = None,
) -> dict[str, Any] | None:
    """Set published_at on a theme result. Returns the updated row, or None if missing."""
    row = session.get(ThemeResult, theme_result_id)
    if row is None:
        return None
    row.published_at = published_at if published_at is not None else int(time.time())
    session.flush()
    return row.to_dict()

# This project was developed with assistance from AI tools.
"""Slot ledger for cycle capacity.

``total_slots`` is the recipient cap; ``available_slots`` mirrors it and is
only rewritten when the cap itself changes.  Consumption is never kept as a
persistent decrement -- it is derived at read time by counting the cycle's
active applications, inside the same transaction as any insert that depends
on it.
"""

import logging

from scholarship_db import Application, Cycle
from scholarship_db.enums import ApplicationStatus
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import CapacityExceededError, CapacityInvariantViolation

logger = logging.getLogger(__name__)

_INACTIVE = sorted(ApplicationStatus.inactive_statuses(), key=lambda s: s.value)


def check_invariant(cycle: Cycle) -> None:
    """Fail unless 0 <= available_slots <= total_slots."""
    total, available = cycle.total_slots, cycle.available_slots
    if total is None or available is None or total < 0 or available < 0 or available > total:
        raise CapacityInvariantViolation(
            f"Cycle {cycle.id}: available_slots={available} total_slots={total} "
            "violates 0 <= available <= total"
        )


def initialize(cycle: Cycle, cap: int) -> None:
    """Seed both counters from the recipient cap of a new cycle."""
    cycle.total_slots = cap
    cycle.available_slots = cap
    check_invariant(cycle)


def apply_cap_change(cycle: Cycle, cap: int) -> None:
    """Reset both counters to a new cap; consumed slots are not carried over."""
    if cap != cycle.total_slots:
        logger.info("Cycle %s recipient cap %s -> %s", cycle.id, cycle.total_slots, cap)
    cycle.total_slots = cap
    cycle.available_slots = cap
    check_invariant(cycle)


def remaining_slots(total_slots: int, active_count: int) -> int:
    return max(total_slots - active_count, 0)


def _active_filter(stmt):
    return stmt.where(Application.status.notin_(_INACTIVE))


async def count_active_applications(session: AsyncSession, cycle_id: int) -> int:
    """Applications on the cycle that still hold a slot."""
    stmt = _active_filter(
        select(func.count(Application.id)).where(Application.cycle_id == cycle_id)
    )
    return (await session.execute(stmt)).scalar() or 0


async def count_active_applications_for(
    session: AsyncSession, cycle_ids: list[int]
) -> dict[int, int]:
    """Batch version of ``count_active_applications``; missing ids count 0."""
    if not cycle_ids:
        return {}
    stmt = _active_filter(
        select(Application.cycle_id, func.count(Application.id))
        .where(Application.cycle_id.in_(cycle_ids))
        .group_by(Application.cycle_id)
    )
    counts = {cycle_id: count for cycle_id, count in (await session.execute(stmt)).all()}
    return {cycle_id: counts.get(cycle_id, 0) for cycle_id in cycle_ids}


async def ensure_capacity(session: AsyncSession, cycle: Cycle) -> int:
    """Hard cap: refuse another application once the cap is reached.

    Caller must hold the cycle row lock so the count stays valid until the
    insert commits.  Returns the slots left before the new application.
    """
    active = await count_active_applications(session, cycle.id)
    left = remaining_slots(cycle.total_slots, active)
    if left == 0:
        logger.warning("Cycle %s is full (%s/%s)", cycle.id, active, cycle.total_slots)
        raise CapacityExceededError(
            f"Cycle {cycle.id} has no remaining slots ({active} of {cycle.total_slots} taken)"
        )
    return left

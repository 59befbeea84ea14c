# This project was developed with assistance from AI tools.
"""Tests for the slot ledger: counters, invariant and hard cap."""

import pytest
from scholarship_db import Application, Cycle
from scholarship_db.enums import ApplicationStatus

from scholarship_api.services import slots
from scholarship_api.services.errors import CapacityExceededError, CapacityInvariantViolation


def test_initialize_sets_both_counters():
    cycle = Cycle()
    slots.initialize(cycle, 7)
    assert cycle.total_slots == 7
    assert cycle.available_slots == 7


def test_initialize_rejects_negative_cap():
    with pytest.raises(CapacityInvariantViolation):
        slots.initialize(Cycle(), -1)


def test_cap_change_resets_both_counters():
    cycle = Cycle(total_slots=10, available_slots=4)
    slots.apply_cap_change(cycle, 3)
    assert (cycle.total_slots, cycle.available_slots) == (3, 3)


@pytest.mark.parametrize(
    "total, available",
    [(5, 6), (5, -1), (-1, 0), (None, 0), (3, None)],
)
def test_check_invariant_detects_violations(total, available):
    with pytest.raises(CapacityInvariantViolation):
        slots.check_invariant(Cycle(total_slots=total, available_slots=available))


def test_check_invariant_accepts_bounds():
    slots.check_invariant(Cycle(total_slots=0, available_slots=0))
    slots.check_invariant(Cycle(total_slots=4, available_slots=4))


def test_remaining_slots_never_negative():
    assert slots.remaining_slots(5, 2) == 3
    assert slots.remaining_slots(5, 5) == 0
    assert slots.remaining_slots(2, 9) == 0


# ---------------------------------------------------------------------------
# Counting against the database
# ---------------------------------------------------------------------------


def _add_application(session, cycle_id, user_id, status):
    session.add(
        Application(
            application_number=f"APP-{user_id}",
            user_id=user_id,
            cycle_id=cycle_id,
            status=status,
        )
    )


async def test_inactive_applications_do_not_hold_slots(db_session, open_cycle):
    _add_application(db_session, open_cycle.id, "u1", ApplicationStatus.DRAFT)
    _add_application(db_session, open_cycle.id, "u2", ApplicationStatus.SUBMITTED)
    _add_application(db_session, open_cycle.id, "u3", ApplicationStatus.APPROVED)
    _add_application(db_session, open_cycle.id, "u4", ApplicationStatus.WITHDRAWN)
    _add_application(db_session, open_cycle.id, "u5", ApplicationStatus.REJECTED)
    await db_session.commit()

    assert await slots.count_active_applications(db_session, open_cycle.id) == 3


async def test_batch_count_includes_cycles_without_applications(db_session, make_cycle):
    first = await make_cycle(name="First")
    second = await make_cycle(name="Second")
    _add_application(db_session, first.id, "u1", ApplicationStatus.DRAFT)
    await db_session.commit()

    counts = await slots.count_active_applications_for(db_session, [first.id, second.id])
    assert counts == {first.id: 1, second.id: 0}


async def test_batch_count_of_nothing_is_empty(db_session):
    assert await slots.count_active_applications_for(db_session, []) == {}


async def test_ensure_capacity_raises_when_full(db_session, make_cycle):
    cycle = await make_cycle(max_recipients=2)
    _add_application(db_session, cycle.id, "u1", ApplicationStatus.DRAFT)
    _add_application(db_session, cycle.id, "u2", ApplicationStatus.UNDER_REVIEW)
    await db_session.commit()

    with pytest.raises(CapacityExceededError):
        await slots.ensure_capacity(db_session, cycle)


async def test_ensure_capacity_returns_remaining(db_session, make_cycle):
    cycle = await make_cycle(max_recipients=2)
    _add_application(db_session, cycle.id, "u1", ApplicationStatus.WITHDRAWN)
    await db_session.commit()

    assert await slots.ensure_capacity(db_session, cycle) == 2

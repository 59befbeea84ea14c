# This project was developed with assistance from AI tools.
"""Tests for persisted <-> external cycle status mapping."""

from datetime import UTC, datetime, timedelta

import pytest
from scholarship_db.enums import CycleLifecycleState, ExternalCycleStatus

from scholarship_api.services.status_mapper import (
    FORWARD_MAP,
    REVERSE_MAP,
    derive_external_status,
    persisted_states_for,
    scholarship_type_of,
    to_external,
    to_persisted,
)

P = CycleLifecycleState
E = ExternalCycleStatus

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "persisted, external",
    [
        (P.DRAFT, E.DRAFT),
        (P.ACTIVE, E.OPEN),
        (P.OPEN, E.OPEN),
        (P.CLOSED, E.CLOSED),
        (P.SUSPENDED, E.SUSPENDED),
        (P.INACTIVE, E.SUSPENDED),
        (P.READY_FOR_LAUNCH, E.DRAFT),
        (P.REVIEWING, E.CLOSED),
        (P.COMPLETED, E.CLOSED),
        (P.CANCELLED, E.SUSPENDED),
    ],
)
def test_forward_mapping(persisted, external):
    assert to_external(persisted) is external


def test_every_persisted_state_is_mapped():
    assert set(FORWARD_MAP) == set(P)


@pytest.mark.parametrize("value", [None, "", "archived", 42])
def test_unknown_persisted_value_maps_to_draft(value):
    assert to_external(value) is E.DRAFT


def test_forward_mapping_accepts_raw_strings_in_any_case():
    assert to_external("ACTIVE") is E.OPEN
    assert to_external("reviewing") is E.CLOSED


@pytest.mark.parametrize("external", list(E))
def test_reverse_then_forward_is_identity(external):
    assert to_external(to_persisted(external)) is external


def test_reverse_mapping_unknown_defaults_to_draft():
    assert to_persisted("paused") is P.DRAFT
    assert to_persisted(None) is P.DRAFT


def test_maps_are_read_only():
    with pytest.raises(TypeError):
        FORWARD_MAP[P.DRAFT] = E.OPEN  # type: ignore[index]
    with pytest.raises(TypeError):
        REVERSE_MAP[E.OPEN] = P.ACTIVE  # type: ignore[index]


# ---------------------------------------------------------------------------
# Date-based override on read
# ---------------------------------------------------------------------------


def test_open_cycle_inside_window_stays_open():
    status = derive_external_status(
        P.ACTIVE, NOW - timedelta(days=1), NOW + timedelta(days=1), NOW
    )
    assert status is E.OPEN


def test_open_cycle_before_window_reads_as_draft():
    status = derive_external_status(
        P.OPEN, NOW + timedelta(days=1), NOW + timedelta(days=10), NOW
    )
    assert status is E.DRAFT


def test_open_cycle_after_deadline_reads_as_closed():
    status = derive_external_status(
        P.ACTIVE, NOW - timedelta(days=10), NOW - timedelta(seconds=1), NOW
    )
    assert status is E.CLOSED


def test_deadline_instant_itself_is_closed():
    assert derive_external_status(P.OPEN, NOW - timedelta(days=1), NOW, NOW) is E.CLOSED


def test_non_open_statuses_ignore_dates():
    past_window = (NOW - timedelta(days=10), NOW - timedelta(days=5))
    assert derive_external_status(P.SUSPENDED, *past_window, NOW) is E.SUSPENDED
    assert derive_external_status(P.DRAFT, *past_window, NOW) is E.DRAFT


def test_naive_datetimes_are_treated_as_utc():
    naive_start = datetime(2026, 3, 1, 0, 0)
    naive_end = datetime(2026, 4, 1, 0, 0)
    assert derive_external_status(P.ACTIVE, naive_start, naive_end, NOW) is E.OPEN


# ---------------------------------------------------------------------------
# Inverse image and type display
# ---------------------------------------------------------------------------


def test_persisted_states_for_open():
    assert persisted_states_for(E.OPEN) == frozenset({P.ACTIVE, P.OPEN})


def test_persisted_states_partition_all_states():
    union = set().union(*(persisted_states_for(e) for e in E))
    assert union == set(P)


def test_scholarship_type_falls_back_to_default():
    assert scholarship_type_of(None) == "FULL"
    assert scholarship_type_of(None, default="PARTIAL") == "PARTIAL"
    assert scholarship_type_of("MERIT_BASED") == "MERIT_BASED"

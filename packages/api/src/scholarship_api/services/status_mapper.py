# This project was developed with assistance from AI tools.
"""Translation between persisted cycle lifecycle states and external status.

The persisted vocabulary (``CycleLifecycleState``) never leaves the service;
API consumers only ever see ``ExternalCycleStatus``.  Every function here is
pure: same inputs, same output, no I/O.
"""

from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType

from scholarship_db.enums import CycleLifecycleState, ExternalCycleStatus, ScholarshipType

_P = CycleLifecycleState
_E = ExternalCycleStatus

FORWARD_MAP: MappingProxyType = MappingProxyType(
    {
        _P.DRAFT: _E.DRAFT,
        _P.ACTIVE: _E.OPEN,
        _P.OPEN: _E.OPEN,
        _P.CLOSED: _E.CLOSED,
        _P.SUSPENDED: _E.SUSPENDED,
        _P.INACTIVE: _E.SUSPENDED,
        _P.READY_FOR_LAUNCH: _E.DRAFT,
        _P.REVIEWING: _E.CLOSED,
        _P.COMPLETED: _E.CLOSED,
        _P.CANCELLED: _E.SUSPENDED,
    }
)

REVERSE_MAP: MappingProxyType = MappingProxyType(
    {
        _E.OPEN: _P.OPEN,
        _E.CLOSED: _P.CLOSED,
        _E.SUSPENDED: _P.SUSPENDED,
        _E.DRAFT: _P.DRAFT,
    }
)

DEFAULT_SCHOLARSHIP_TYPE = ScholarshipType.FULL.value


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    raw = value.value if isinstance(value, Enum) else value
    try:
        return enum_cls(str(raw).upper())
    except ValueError:
        return None


def to_external(persisted: CycleLifecycleState | str | None) -> ExternalCycleStatus:
    """Map a persisted state to its external status. Unknown values -> DRAFT."""
    state = _coerce(CycleLifecycleState, persisted) if persisted is not None else None
    return FORWARD_MAP.get(state, _E.DRAFT)


def to_persisted(external: ExternalCycleStatus | str | None) -> CycleLifecycleState:
    """Map an incoming external status to the state to store. Unknown -> DRAFT."""
    status = _coerce(ExternalCycleStatus, external) if external is not None else None
    return REVERSE_MAP.get(status, _P.DRAFT)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def derive_external_status(
    persisted: CycleLifecycleState | str | None,
    application_start_date: datetime | None,
    application_end_date: datetime | None,
    now: datetime,
) -> ExternalCycleStatus:
    """External status with the application window applied.

    Only an OPEN base status is overridden: before the window it reads as
    DRAFT (not yet open), at or after the deadline as CLOSED.
    """
    base = to_external(persisted)
    if base is not _E.OPEN:
        return base

    now = as_utc(now)
    if application_start_date is not None and now < as_utc(application_start_date):
        return _E.DRAFT
    if application_end_date is not None and now >= as_utc(application_end_date):
        return _E.CLOSED
    return base


def persisted_states_for(external: ExternalCycleStatus) -> frozenset[CycleLifecycleState]:
    """All persisted states whose base mapping is ``external``."""
    return frozenset(p for p, e in FORWARD_MAP.items() if e is external)


def scholarship_type_of(
    scholarship_type: str | None, default: str = DEFAULT_SCHOLARSHIP_TYPE
) -> str:
    """Displayed scholarship type, falling back to ``default`` when unset."""
    return scholarship_type or default

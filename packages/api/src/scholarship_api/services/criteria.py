# This project was developed with assistance from AI tools.
"""Eligibility criteria attached to a cycle.

The scholarship type is a plain column on the cycle, not a criterion row, so
the criteria collection only ever holds genuine, student-facing
requirements.  Functions operate on a cycle whose ``criteria`` collection is
already loaded (or on a new, unsaved cycle).
"""

from enum import Enum

from scholarship_db import Criterion, Cycle
from scholarship_db.enums import CriteriaType


def _normalize(values: list[str]) -> list[str]:
    """Strip, drop blanks and duplicates, keep first-seen order."""
    cleaned = (v.strip() for v in values if v is not None)
    return list(dict.fromkeys(v for v in cleaned if v))


def list_eligibility_criteria(cycle: Cycle) -> list[str]:
    return [c.criteria_value for c in cycle.criteria if c.criteria_type == CriteriaType.GENERAL]


def set_eligibility_criteria(cycle: Cycle, values: list[str]) -> bool:
    """Replace the cycle's general criteria, each one mandatory.

    Returns False (and touches nothing) when the set is already identical.
    """
    wanted = _normalize(values)
    if list_eligibility_criteria(cycle) == wanted:
        return False
    kept = [c for c in cycle.criteria if c.criteria_type != CriteriaType.GENERAL]
    cycle.criteria = kept + [
        Criterion(criteria_type=CriteriaType.GENERAL, criteria_value=value, is_mandatory=True)
        for value in wanted
    ]
    return True


def set_type(cycle: Cycle, value: str | Enum | None) -> None:
    """Record the cycle's scholarship type, replacing any previous value."""
    if isinstance(value, Enum):
        value = value.value
    cycle.scholarship_type = value

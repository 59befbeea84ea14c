# This project was developed with assistance from AI tools.
"""
Domain enums for the scholarship funding lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class CycleLifecycleState(str, enum.Enum):
    """Persisted lifecycle state of a funding cycle.

    Richer than what API consumers see; see ExternalCycleStatus.
    """

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    SUSPENDED = "SUSPENDED"
    INACTIVE = "INACTIVE"
    READY_FOR_LAUNCH = "READY_FOR_LAUNCH"
    REVIEWING = "REVIEWING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ExternalCycleStatus(str, enum.Enum):
    """Cycle status exposed to API consumers. Never persisted."""

    DRAFT = "DRAFT"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    SUSPENDED = "SUSPENDED"


class ApplicationStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"

    @classmethod
    def terminal_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses from which an application can no longer move."""
        return frozenset({cls.APPROVED, cls.REJECTED, cls.WITHDRAWN})

    @classmethod
    def inactive_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses that neither hold a slot nor block a new application."""
        return frozenset({cls.REJECTED, cls.WITHDRAWN})

    @classmethod
    def review_decisions(cls) -> frozenset["ApplicationStatus"]:
        """Statuses a reviewer may move an application into."""
        return frozenset({cls.UNDER_REVIEW, cls.APPROVED, cls.REJECTED})

    @classmethod
    def valid_transitions(cls) -> dict["ApplicationStatus", frozenset["ApplicationStatus"]]:
        """Allowed status transitions in the application lifecycle."""
        return {
            cls.DRAFT: frozenset({cls.SUBMITTED, cls.WITHDRAWN}),
            cls.SUBMITTED: frozenset(
                {cls.UNDER_REVIEW, cls.APPROVED, cls.REJECTED, cls.WITHDRAWN}
            ),
            cls.UNDER_REVIEW: frozenset({cls.APPROVED, cls.REJECTED, cls.WITHDRAWN}),
            cls.APPROVED: frozenset(),
            cls.REJECTED: frozenset(),
            cls.WITHDRAWN: frozenset(),
        }


class CriteriaType(str, enum.Enum):
    GENERAL = "GENERAL"


class ScholarshipType(str, enum.Enum):
    FULL = "FULL"
    PARTIAL = "PARTIAL"
    MERIT_BASED = "MERIT_BASED"
    NEED_BASED = "NEED_BASED"


class SponsorType(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    ORGANIZATION = "ORGANIZATION"


class DisbursementSchedule(str, enum.Enum):
    SEMESTER = "SEMESTER"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"
    LUMP_SUM = "LUMP_SUM"


class HistoryAction(str, enum.Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    SUBMITTED = "SUBMITTED"
    REVIEWED = "REVIEWED"
    WITHDRAWN = "WITHDRAWN"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    STUDENT = "student"
    REVIEWER = "reviewer"
    SPONSOR = "sponsor"

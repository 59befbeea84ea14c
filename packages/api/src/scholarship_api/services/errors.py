# This project was developed with assistance from AI tools.
"""Typed failures raised by the lifecycle engine.

Services raise these before committing, so a failed operation never leaves a
partial write behind.  The HTTP layer maps each class to a status code in
``main.py``; nothing in the engine knows about HTTP.
"""


class ScholarshipError(Exception):
    """Base class for all engine failures."""


class NotFoundError(ScholarshipError, LookupError):
    """Unknown id on a get, update or delete."""

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with ID {resource_id} not found")


class MissingRequiredFieldError(ScholarshipError, ValueError):
    """A create call lacked an identifier it cannot proceed without."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field '{field}'")


class InvalidTransitionError(ScholarshipError, ValueError):
    """Raised when an application or cycle state change is not allowed."""


class InvalidCycleDatesError(ScholarshipError, ValueError):
    """Application window start is not strictly before its end."""


class CapacityInvariantViolation(ScholarshipError):
    """Slot bookkeeping on a cycle is inconsistent."""


class CapacityExceededError(ScholarshipError):
    """A cycle has no remaining slots for another application."""


class DuplicateApplicationError(ScholarshipError):
    """Applicant already holds an active application for the cycle."""


class ConflictingResourceError(ScholarshipError):
    """A referenced resource (sponsor, program) does not exist or clashes."""

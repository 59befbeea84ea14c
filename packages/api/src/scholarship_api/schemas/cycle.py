# This project was developed with assistance from AI tools.
"""Cycle request/response schemas."""

import re
from datetime import UTC, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from scholarship_db.enums import DisbursementSchedule, ExternalCycleStatus, ScholarshipType

from . import Pagination

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _window_bound(value, *, end_of_day: bool):
    """Expand a bare YYYY-MM-DD to the start (or end) of that UTC day."""
    if isinstance(value, str) and _DATE_ONLY.match(value):
        day = datetime.strptime(value, "%Y-%m-%d").date()
        clock = time(23, 59, 59, 999000) if end_of_day else time(0, 0)
        return datetime.combine(day, clock, tzinfo=UTC)
    return value


def _assume_utc(value):
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class CycleCreate(BaseModel):
    """Create a new funding cycle.

    Either ``program_id`` (an existing program) or ``sponsor_id`` (find or
    create the sponsor's program called ``name``) must be given.
    """

    sponsor_id: int | None = None
    program_id: int | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str = ""
    amount: Decimal = Field(ge=0)
    max_recipients: int = Field(ge=1)
    application_start_date: datetime
    application_deadline: datetime
    eligibility_criteria: list[str] = Field(default_factory=list)
    type: ScholarshipType | None = None
    status: ExternalCycleStatus | None = None
    academic_year: str | None = Field(default=None, max_length=20)
    display_name: str | None = Field(default=None, max_length=255)
    duration_months: int = Field(default=12, ge=1)
    disbursement_schedule: DisbursementSchedule = DisbursementSchedule.SEMESTER

    @field_validator("application_start_date", mode="before")
    @classmethod
    def _start_of_day(cls, value):
        return _window_bound(value, end_of_day=False)

    @field_validator("application_deadline", mode="before")
    @classmethod
    def _end_of_day(cls, value):
        return _window_bound(value, end_of_day=True)

    @field_validator("application_start_date", "application_deadline", mode="after")
    @classmethod
    def _aware(cls, value):
        return _assume_utc(value)

    @model_validator(mode="after")
    def _window_is_ordered(self):
        if self.application_start_date >= self.application_deadline:
            raise ValueError("application_start_date must be before application_deadline")
        return self


class CycleUpdate(BaseModel):
    """Partial update to an existing cycle."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    amount: Decimal | None = Field(default=None, ge=0)
    max_recipients: int | None = Field(default=None, ge=1)
    application_start_date: datetime | None = None
    application_deadline: datetime | None = None
    eligibility_criteria: list[str] | None = None
    type: ScholarshipType | None = None
    status: ExternalCycleStatus | None = None

    @field_validator("application_start_date", mode="before")
    @classmethod
    def _start_of_day(cls, value):
        return _window_bound(value, end_of_day=False)

    @field_validator("application_deadline", mode="before")
    @classmethod
    def _end_of_day(cls, value):
        return _window_bound(value, end_of_day=True)

    @field_validator("application_start_date", "application_deadline", mode="after")
    @classmethod
    def _aware(cls, value):
        return _assume_utc(value)


class CycleResponse(BaseModel):
    """Single cycle as seen by API consumers -- external status only."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    program_id: int
    name: str
    description: str = ""
    sponsor: str
    type: str
    amount: Decimal
    academic_year: str
    application_start_date: datetime
    application_deadline: datetime
    eligibility_criteria: list[str] = []
    max_recipients: int
    available_slots: int
    current_applications: int
    remaining_slots: int
    duration_months: int
    disbursement_schedule: DisbursementSchedule
    status: ExternalCycleStatus
    created_at: datetime
    updated_at: datetime


class CycleListResponse(BaseModel):
    """Paginated list of cycles."""

    data: list[CycleResponse]
    pagination: Pagination


class ProgramResponse(BaseModel):
    """A program with its cycles nested, newest academic year first."""

    id: int
    sponsor_id: int
    sponsor: str
    name: str
    description: str = ""
    default_amount: Decimal | None = None
    default_slots: int | None = None
    start_year: int
    cycles: list[CycleResponse] = []
    created_at: datetime
    updated_at: datetime


class ProgramListResponse(BaseModel):
    """Paginated list of programs."""

    data: list[ProgramResponse]
    pagination: Pagination

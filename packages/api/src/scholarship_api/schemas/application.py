# This project was developed with assistance from AI tools.
"""Application request/response schemas.

``AcademicInfo`` and ``FinancialInfo`` are the structured sub-records of an
application.  They are stored together in the ``additional_info`` JSON column
and converted only at the storage boundary via ``AdditionalInfo``.
"""

import json
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from scholarship_db.enums import ApplicationStatus, HistoryAction

from . import Pagination


class AcademicInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    institution: str | None = None
    student_id: str | None = None
    major: str | None = None
    gpa: float | None = Field(default=None, ge=0, le=5)
    year_of_study: int | None = Field(default=None, ge=1, le=10)
    achievements: list[str] | None = None


class FinancialInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    family_income: float | None = Field(default=None, ge=0)
    dependents: int | None = Field(default=None, ge=0)
    financial_need: str | None = None
    has_other_funding: bool | None = None


def _merge(current: BaseModel, patch: BaseModel | None) -> BaseModel:
    """Overlay only the fields the caller actually set on ``patch``."""
    if patch is None:
        return current
    merged = current.model_dump(exclude_none=True)
    merged.update(patch.model_dump(exclude_unset=True))
    return type(current).model_validate(merged)


class AdditionalInfo(BaseModel):
    """Academic + financial details, serialized into one storage column."""

    academic: AcademicInfo = Field(default_factory=AcademicInfo)
    financial: FinancialInfo = Field(default_factory=FinancialInfo)

    def merged_with(
        self,
        academic: AcademicInfo | None = None,
        financial: FinancialInfo | None = None,
    ) -> "AdditionalInfo":
        return AdditionalInfo(
            academic=_merge(self.academic, academic),
            financial=_merge(self.financial, financial),
        )

    def to_storage(self) -> dict:
        return {
            "academic": self.academic.model_dump(mode="json", exclude_none=True),
            "financial": self.financial.model_dump(mode="json", exclude_none=True),
        }

    @classmethod
    def from_storage(cls, raw: dict | str | None) -> "AdditionalInfo":
        """Rebuild from the stored column. Accepts legacy JSON text as well."""
        if not raw:
            return cls()
        if isinstance(raw, str):
            raw = json.loads(raw)
        return cls(
            academic=AcademicInfo.model_validate(raw.get("academic") or {}),
            financial=FinancialInfo.model_validate(raw.get("financial") or {}),
        )


class ApplicationCreate(BaseModel):
    """Create a new (draft) scholarship application."""

    cycle_id: int
    applicant_id: str | None = Field(
        default=None,
        description="Applicant user id. Admins only; students always apply as themselves.",
    )
    motivation_letter: str | None = None
    academic_info: AcademicInfo | None = None
    financial_info: FinancialInfo | None = None
    document_ids: list[str] = Field(default_factory=list)


class ApplicationUpdate(BaseModel):
    """Partial update to a draft application."""

    motivation_letter: str | None = None
    academic_info: AcademicInfo | None = None
    financial_info: FinancialInfo | None = None


class ApplicationReviewRequest(BaseModel):
    """Reviewer decision on a submitted application."""

    status: ApplicationStatus
    comments: str | None = None
    score: int | None = Field(default=None, ge=0, le=100)


class ApplicationResponse(BaseModel):
    """Single application response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    application_number: str
    applicant_id: str
    cycle_id: int
    status: ApplicationStatus
    motivation_letter: str | None = None
    academic_info: AcademicInfo
    financial_info: FinancialInfo
    document_ids: list[str] = []
    decision_notes: str | None = None
    decision_by: str | None = None
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    decision_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationResponse]
    pagination: Pagination


class ApplicationHistoryEntry(BaseModel):
    """One row of an application's history trail."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    action: HistoryAction
    from_status: str | None = None
    to_status: str | None = None
    performed_by: str | None = None
    notes: str | None = None
    created_at: datetime

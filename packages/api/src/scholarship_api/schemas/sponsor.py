# This project was developed with assistance from AI tools.
"""Sponsor request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from scholarship_db.enums import SponsorType

from . import Pagination


class SponsorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: SponsorType = SponsorType.ORGANIZATION
    contact_person: str | None = None
    email: str | None = None


class SponsorUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: SponsorType | None = None
    contact_person: str | None = None
    email: str | None = None
    is_active: bool | None = None


class SponsorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: SponsorType
    contact_person: str | None = None
    email: str | None = None
    is_active: bool
    created_at: datetime


class SponsorListResponse(BaseModel):
    data: list[SponsorResponse]
    pagination: Pagination

# This project was developed with assistance from AI tools.
"""Sponsor routes (admin only)."""

from fastapi import APIRouter, Depends, Query, Response, status
from scholarship_db import get_db
from scholarship_db.enums import UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..middleware.auth import require_roles
from ..schemas import Pagination
from ..schemas.sponsor import SponsorCreate, SponsorListResponse, SponsorResponse, SponsorUpdate
from ..services import sponsor as sponsor_service

router = APIRouter(dependencies=[Depends(require_roles(UserRole.ADMIN))])


@router.post("/", response_model=SponsorResponse, status_code=status.HTTP_201_CREATED)
async def create_sponsor(
    body: SponsorCreate,
    session: AsyncSession = Depends(get_db),
) -> SponsorResponse:
    sponsor = await sponsor_service.create_sponsor(session, **body.model_dump())
    return SponsorResponse.model_validate(sponsor)


@router.get("/", response_model=SponsorListResponse)
async def list_sponsors(
    session: AsyncSession = Depends(get_db),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
) -> SponsorListResponse:
    sponsors, total = await sponsor_service.list_sponsors(
        session, offset=(page - 1) * limit, limit=limit
    )
    return SponsorListResponse(
        data=[SponsorResponse.model_validate(s) for s in sponsors],
        pagination=Pagination.build(total=total, page=page, limit=limit),
    )


@router.get("/{sponsor_id}", response_model=SponsorResponse)
async def get_sponsor(
    sponsor_id: int,
    session: AsyncSession = Depends(get_db),
) -> SponsorResponse:
    sponsor = await sponsor_service.get_sponsor(session, sponsor_id)
    return SponsorResponse.model_validate(sponsor)


@router.patch("/{sponsor_id}", response_model=SponsorResponse)
async def update_sponsor(
    sponsor_id: int,
    body: SponsorUpdate,
    session: AsyncSession = Depends(get_db),
) -> SponsorResponse:
    sponsor = await sponsor_service.update_sponsor(
        session, sponsor_id, **body.model_dump(exclude_unset=True)
    )
    return SponsorResponse.model_validate(sponsor)


@router.delete("/{sponsor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sponsor(
    sponsor_id: int,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a sponsor; 409 while programs still reference it."""
    await sponsor_service.delete_sponsor(session, sponsor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

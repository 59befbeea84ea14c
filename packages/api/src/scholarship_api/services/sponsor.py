# This project was developed with assistance from AI tools.
"""Sponsor registry -- the funding entities cycles are created under."""

import logging

from scholarship_db import Program, Sponsor
from scholarship_db.enums import SponsorType
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import ConflictingResourceError, NotFoundError

logger = logging.getLogger(__name__)

_UPDATABLE = ("name", "type", "contact_person", "email", "is_active")
_NOT_NULL = frozenset({"name", "type", "is_active"})


async def create_sponsor(
    session: AsyncSession,
    *,
    name: str,
    type: SponsorType = SponsorType.ORGANIZATION,
    contact_person: str | None = None,
    email: str | None = None,
) -> Sponsor:
    sponsor = Sponsor(name=name, type=type, contact_person=contact_person, email=email)
    session.add(sponsor)
    await session.flush()
    sponsor_id = sponsor.id
    await session.commit()
    logger.info("Sponsor %s created: %s", sponsor_id, name)
    return await get_sponsor(session, sponsor_id)


async def get_sponsor(session: AsyncSession, sponsor_id: int) -> Sponsor:
    stmt = (
        select(Sponsor)
        .where(Sponsor.id == sponsor_id)
        .execution_options(populate_existing=True)
    )
    sponsor = (await session.execute(stmt)).scalar_one_or_none()
    if sponsor is None:
        raise NotFoundError("Sponsor", sponsor_id)
    return sponsor


async def list_sponsors(
    session: AsyncSession, *, offset: int = 0, limit: int = 20
) -> tuple[list[Sponsor], int]:
    total = (await session.execute(select(func.count(Sponsor.id)))).scalar() or 0
    stmt = select(Sponsor).order_by(Sponsor.name.asc(), Sponsor.id.asc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def update_sponsor(session: AsyncSession, sponsor_id: int, **updates) -> Sponsor:
    """Apply a partial update.

    Keys outside the editable fields are ignored, as is None for a column that
    cannot be null.  Contact details can be cleared by passing None.
    """
    sponsor = await get_sponsor(session, sponsor_id)
    changed = sorted(
        k for k in _UPDATABLE
        if k in updates and not (updates[k] is None and k in _NOT_NULL)
    )
    for key in changed:
        setattr(sponsor, key, updates[key])
    await session.commit()
    logger.info("Sponsor %s updated: %s", sponsor_id, changed)
    return await get_sponsor(session, sponsor_id)


async def delete_sponsor(session: AsyncSession, sponsor_id: int) -> None:
    """Delete a sponsor that no program references.

    Raises:
        NotFoundError: unknown sponsor.
        ConflictingResourceError: programs still belong to the sponsor.
    """
    sponsor = await get_sponsor(session, sponsor_id)
    programs = (
        await session.execute(
            select(func.count(Program.id)).where(Program.sponsor_id == sponsor_id)
        )
    ).scalar() or 0
    if programs:
        raise ConflictingResourceError(
            f"Sponsor {sponsor_id} still has {programs} program(s); delete them first"
        )
    await session.delete(sponsor)
    await session.commit()
    logger.info("Sponsor %s deleted", sponsor_id)

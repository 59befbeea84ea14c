# This project was developed with assistance from AI tools.
"""Application history trail.

One row per action on an application.  Rows are added by id rather than
through the relationship so the application's history collection never has
to be loaded just to append.
"""

import logging

from scholarship_db import ApplicationHistory
from scholarship_db.enums import ApplicationStatus, HistoryAction
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def record_history(
    session: AsyncSession,
    *,
    application_id: int,
    action: HistoryAction,
    performed_by: str | None,
    from_status: ApplicationStatus | None = None,
    to_status: ApplicationStatus | None = None,
    notes: str | None = None,
) -> ApplicationHistory:
    """Add a history row in the caller's transaction (flushed, not committed)."""
    entry = ApplicationHistory(
        application_id=application_id,
        action=action,
        from_status=from_status.value if from_status else None,
        to_status=to_status.value if to_status else None,
        performed_by=performed_by,
        notes=notes,
    )
    session.add(entry)
    await session.flush()
    return entry


async def list_history(session: AsyncSession, application_id: int) -> list[ApplicationHistory]:
    """History for an application, oldest first.

    Does NOT enforce data scope -- caller must check access to the application first.
    """
    stmt = (
        select(ApplicationHistory)
        .where(ApplicationHistory.application_id == application_id)
        .order_by(ApplicationHistory.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())

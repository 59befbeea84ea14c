# This project was developed with assistance from AI tools.
"""Program reads: the reusable scholarship templates with their cycles nested.

Programs are created implicitly by ``cycle.create_cycle``; this module only
lists and loads them.  Filters apply to the nested cycles -- a program
matches when at least one of its cycles does.
"""

import logging
from datetime import UTC, datetime

from scholarship_db import Cycle, Program
from scholarship_db.enums import ExternalCycleStatus
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .cycle import cycle_filters
from .errors import NotFoundError
from .status_mapper import DEFAULT_SCHOLARSHIP_TYPE

logger = logging.getLogger(__name__)


def _eager():
    return (
        selectinload(Program.sponsor),
        selectinload(Program.cycles).selectinload(Cycle.criteria),
        selectinload(Program.cycles).selectinload(Cycle.program).selectinload(Program.sponsor),
    )


def ordered_cycles(program: Program) -> list[Cycle]:
    """A loaded program's cycles, newest academic year first."""
    return sorted(program.cycles, key=lambda c: (c.academic_year, c.id), reverse=True)


async def get_program(session: AsyncSession, program_id: int) -> Program:
    """Load a program with its sponsor and cycles. Raises NotFoundError."""
    stmt = (
        select(Program)
        .options(*_eager())
        .where(Program.id == program_id)
        .execution_options(populate_existing=True)
    )
    program = (await session.execute(stmt)).scalar_one_or_none()
    if program is None:
        raise NotFoundError("Program", program_id)
    return program


async def list_programs(
    session: AsyncSession,
    *,
    status: ExternalCycleStatus | None = None,
    scholarship_type: str | None = None,
    offset: int = 0,
    limit: int = 20,
    now: datetime | None = None,
    default_type: str = DEFAULT_SCHOLARSHIP_TYPE,
) -> tuple[list[Program], int]:
    """Programs newest first, optionally only those with a matching cycle.

    All of a matching program's cycles are returned, not just the ones that
    matched the filter.
    """
    now = now or datetime.now(UTC)
    clauses = cycle_filters(status, scholarship_type, now, default_type)

    count_stmt = select(func.count(Program.id))
    stmt = (
        select(Program)
        .options(*_eager())
        .order_by(Program.created_at.desc(), Program.id.desc())
        .offset(offset)
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    if clauses:
        match = Program.cycles.any(and_(*clauses))
        count_stmt = count_stmt.where(match)
        stmt = stmt.where(match)

    total = (await session.execute(count_stmt)).scalar() or 0
    result = await session.execute(stmt)
    programs = list(result.scalars().all())
    logger.debug(
        "Listed %s of %s programs (status=%s, type=%s)",
        len(programs), total, status, scholarship_type,
    )
    return programs, total

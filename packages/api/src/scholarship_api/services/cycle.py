# This project was developed with assistance from AI tools.
"""Cycle service: create, update, state changes, delete and listing.

A cycle is one funding period of a program.  Writes lock the cycle row,
validate everything up front, then mutate and commit once; reads always
re-query with eager loading so callers never trigger a lazy load.
"""

import logging
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from scholarship_db import Cycle, Program, Sponsor
from scholarship_db.enums import CycleLifecycleState, DisbursementSchedule, ExternalCycleStatus
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from . import cascade, criteria, slots
from .errors import (
    ConflictingResourceError,
    InvalidCycleDatesError,
    MissingRequiredFieldError,
    NotFoundError,
)
from .status_mapper import DEFAULT_SCHOLARSHIP_TYPE, as_utc, persisted_states_for, to_persisted

logger = logging.getLogger(__name__)

_ORDERING = (Cycle.academic_year.desc(), Cycle.created_at.desc(), Cycle.id.desc())


def _eager():
    return (
        selectinload(Cycle.program).selectinload(Program.sponsor),
        selectinload(Cycle.criteria),
    )


def _validate_window(start: datetime | None, end: datetime | None) -> None:
    if start is None or end is None:
        raise InvalidCycleDatesError("Both application_start_date and application_end_date are required")
    if as_utc(start) >= as_utc(end):
        raise InvalidCycleDatesError(
            f"application_start_date ({start.isoformat()}) must be before "
            f"application_end_date ({end.isoformat()})"
        )


def default_academic_year(start: datetime) -> str:
    return f"{start.year}-{start.year + 1}"


async def get_cycle(session: AsyncSession, cycle_id: int, *, for_update: bool = False) -> Cycle:
    """Load a cycle with program, sponsor and criteria. Raises NotFoundError."""
    stmt = (
        select(Cycle)
        .options(*_eager())
        .where(Cycle.id == cycle_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update(of=Cycle)
    cycle = (await session.execute(stmt)).scalar_one_or_none()
    if cycle is None:
        raise NotFoundError("Cycle", cycle_id)
    return cycle


async def _resolve_program(
    session: AsyncSession,
    *,
    program_id: int | None,
    sponsor_id: int | None,
    name: str | None,
    description: str,
    amount: Decimal,
    max_recipients: int,
    start_year: int,
) -> Program:
    """Existing program by id, or the sponsor's program of this name (created if new)."""
    if program_id is not None:
        program = await session.get(Program, program_id)
        if program is None:
            raise ConflictingResourceError(f"Program with ID {program_id} does not exist")
        return program

    if sponsor_id is None:
        raise MissingRequiredFieldError("sponsor_id")
    if not name:
        raise MissingRequiredFieldError("name")
    if await session.get(Sponsor, sponsor_id) is None:
        raise ConflictingResourceError(f"Sponsor with ID {sponsor_id} does not exist")

    stmt = select(Program).where(Program.sponsor_id == sponsor_id, Program.name == name)
    program = (await session.execute(stmt)).scalar_one_or_none()
    if program is not None:
        return program

    program = Program(
        sponsor_id=sponsor_id,
        name=name,
        description=description or "",
        default_amount=amount,
        default_slots=max_recipients,
        start_year=start_year,
    )
    session.add(program)
    await session.flush()
    logger.info("Program %s created for sponsor %s: %s", program.id, sponsor_id, name)
    return program


async def create_cycle(
    session: AsyncSession,
    *,
    amount: Decimal,
    max_recipients: int,
    application_start_date: datetime,
    application_end_date: datetime,
    sponsor_id: int | None = None,
    program_id: int | None = None,
    name: str | None = None,
    description: str = "",
    eligibility_criteria: list[str] | None = None,
    scholarship_type: str | None = None,
    status: ExternalCycleStatus | str | None = None,
    academic_year: str | None = None,
    display_name: str | None = None,
    duration_months: int = 12,
    disbursement_schedule: DisbursementSchedule = DisbursementSchedule.SEMESTER,
) -> Cycle:
    """Create a cycle under an existing program or a sponsor's (new) program.

    Raises:
        MissingRequiredFieldError: neither program_id nor sponsor_id given.
        ConflictingResourceError: the referenced program or sponsor is unknown.
        InvalidCycleDatesError: start is not before end.
    """
    if program_id is None and sponsor_id is None:
        raise MissingRequiredFieldError("sponsor_id")
    _validate_window(application_start_date, application_end_date)

    program = await _resolve_program(
        session,
        program_id=program_id,
        sponsor_id=sponsor_id,
        name=name,
        description=description,
        amount=amount,
        max_recipients=max_recipients,
        start_year=application_start_date.year,
    )

    year = academic_year or default_academic_year(application_start_date)
    cycle = Cycle(
        program_id=program.id,
        academic_year=year,
        display_name=display_name or f"{program.name} {year}",
        amount=amount,
        application_start_date=application_start_date,
        application_end_date=application_end_date,
        duration_months=duration_months,
        disbursement_schedule=disbursement_schedule,
        persisted_status=(
            to_persisted(status) if status is not None else CycleLifecycleState.ACTIVE
        ),
    )
    slots.initialize(cycle, max_recipients)
    criteria.set_eligibility_criteria(cycle, eligibility_criteria or [])
    if scholarship_type is not None:
        criteria.set_type(cycle, scholarship_type)

    session.add(cycle)
    await session.flush()
    cycle_id = cycle.id  # capture before commit
    await session.commit()
    logger.info(
        "Cycle %s created for program %s (%s, %s slots, state=%s)",
        cycle_id, program.id, year, max_recipients, cycle.persisted_status.value,
    )
    return await get_cycle(session, cycle_id)


async def _rename_program(session: AsyncSession, program: Program, name: str) -> None:
    if program.name == name:
        return
    clash = await session.execute(
        select(Program.id).where(
            Program.sponsor_id == program.sponsor_id,
            Program.name == name,
            Program.id != program.id,
        )
    )
    if clash.first() is not None:
        raise ConflictingResourceError(
            f"Sponsor {program.sponsor_id} already has a program named '{name}'"
        )
    program.name = name


async def update_cycle(session: AsyncSession, cycle_id: int, **updates) -> Cycle:
    """Apply a partial update to a cycle.

    Recognized keys: name, description, amount, max_recipients,
    application_start_date, application_end_date, eligibility_criteria,
    scholarship_type, status.  Keys whose value is None are ignored.
    """
    cycle = await get_cycle(session, cycle_id, for_update=True)
    program = cycle.program
    fields = {k: v for k, v in updates.items() if v is not None}

    start = fields.get("application_start_date", cycle.application_start_date)
    end = fields.get("application_end_date", cycle.application_end_date)
    if "application_start_date" in fields or "application_end_date" in fields:
        _validate_window(start, end)

    if fields.get("name"):
        await _rename_program(session, program, fields["name"])
        cycle.display_name = fields["name"]
    if "description" in fields:
        program.description = fields["description"]
    if "amount" in fields:
        cycle.amount = fields["amount"]
    if "max_recipients" in fields:
        slots.apply_cap_change(cycle, fields["max_recipients"])
    cycle.application_start_date = start
    cycle.application_end_date = end
    if "eligibility_criteria" in fields:
        criteria.set_eligibility_criteria(cycle, fields["eligibility_criteria"])
    if "scholarship_type" in fields:
        criteria.set_type(cycle, fields["scholarship_type"])
    if "status" in fields:
        cycle.persisted_status = to_persisted(fields["status"])

    slots.check_invariant(cycle)
    await session.commit()
    logger.info("Cycle %s updated: %s", cycle_id, sorted(fields))
    return await get_cycle(session, cycle_id)


async def set_cycle_state(
    session: AsyncSession, cycle_id: int, state: CycleLifecycleState
) -> Cycle:
    """Reassign the persisted lifecycle state. Any state may follow any other."""
    cycle = await get_cycle(session, cycle_id, for_update=True)
    previous = cycle.persisted_status
    cycle.persisted_status = state
    await session.commit()
    logger.info(
        "Cycle %s state %s -> %s",
        cycle_id, previous.value if previous else None, state.value,
    )
    return await get_cycle(session, cycle_id)


async def delete_cycle(session: AsyncSession, cycle_id: int) -> dict[str, int]:
    """Delete a cycle and everything it owns in one transaction."""
    removed = await cascade.delete_cycle_tree(session, cycle_id)
    await session.commit()
    logger.info("Cycle %s deleted with dependents %s", cycle_id, removed)
    return removed


def status_clause(status: ExternalCycleStatus, now: datetime):
    """WHERE clause matching cycles whose *derived* external status is ``status``."""
    open_base = Cycle.persisted_status.in_(
        sorted(persisted_states_for(ExternalCycleStatus.OPEN), key=lambda s: s.value)
    )
    if status is ExternalCycleStatus.OPEN:
        return and_(
            open_base,
            Cycle.application_start_date <= now,
            Cycle.application_end_date > now,
        )
    base = Cycle.persisted_status.in_(
        sorted(persisted_states_for(status), key=lambda s: s.value)
    )
    if status is ExternalCycleStatus.DRAFT:
        return or_(base, and_(open_base, Cycle.application_start_date > now))
    if status is ExternalCycleStatus.CLOSED:
        return or_(base, and_(open_base, Cycle.application_end_date <= now))
    return base


def type_clause(scholarship_type: str, default: str = DEFAULT_SCHOLARSHIP_TYPE):
    """WHERE clause matching cycles whose *displayed* type is ``scholarship_type``."""
    value = scholarship_type.value if isinstance(scholarship_type, Enum) else str(scholarship_type)
    if value == default:
        return or_(Cycle.scholarship_type == value, Cycle.scholarship_type.is_(None))
    return Cycle.scholarship_type == value


def cycle_filters(
    status: ExternalCycleStatus | None,
    scholarship_type: str | None,
    now: datetime,
    default_type: str = DEFAULT_SCHOLARSHIP_TYPE,
) -> list:
    clauses = []
    if status is not None:
        clauses.append(status_clause(status, now))
    if scholarship_type is not None:
        clauses.append(type_clause(scholarship_type, default_type))
    return clauses


async def list_cycles(
    session: AsyncSession,
    *,
    status: ExternalCycleStatus | None = None,
    scholarship_type: str | None = None,
    offset: int = 0,
    limit: int = 20,
    now: datetime | None = None,
    default_type: str = DEFAULT_SCHOLARSHIP_TYPE,
) -> tuple[list[Cycle], int]:
    """Cycles newest academic year first, optionally filtered by external status and type."""
    now = now or datetime.now(UTC)
    clauses = cycle_filters(status, scholarship_type, now, default_type)

    count_stmt = select(func.count(Cycle.id)).where(*clauses)
    stmt = (
        select(Cycle)
        .options(*_eager())
        .where(*clauses)
        .order_by(*_ORDERING)
        .offset(offset)
        .limit(limit)
    )

    total = (await session.execute(count_stmt)).scalar() or 0
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def list_program_cycles(session: AsyncSession, program_id: int) -> list[Cycle]:
    """All cycles of one program. Raises NotFoundError for an unknown program."""
    if await session.get(Program, program_id) is None:
        raise NotFoundError("Program", program_id)
    stmt = (
        select(Cycle)
        .options(*_eager())
        .where(Cycle.program_id == program_id)
        .order_by(*_ORDERING)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())

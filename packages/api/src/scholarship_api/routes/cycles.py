# This project was developed with assistance from AI tools.
"""Cycle routes.

Responses only ever carry the external status, derived from the persisted
lifecycle state and the application window at request time.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query, Response, status
from scholarship_db import Cycle, Program, get_db
from scholarship_db.enums import ExternalCycleStatus, ScholarshipType, UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.cycle import (
    CycleCreate,
    CycleListResponse,
    CycleResponse,
    CycleUpdate,
    ProgramListResponse,
    ProgramResponse,
)
from ..services import cycle as cycle_service
from ..services import program as program_service
from ..services import slots
from ..services.criteria import list_eligibility_criteria
from ..services.status_mapper import derive_external_status, scholarship_type_of

router = APIRouter()
programs_router = APIRouter()

_UNKNOWN_SPONSOR = "Unknown Sponsor"


def _build_cycle_response(cycle: Cycle, active_count: int, now: datetime) -> CycleResponse:
    """Build CycleResponse from an eagerly loaded Cycle and its active application count."""
    program = cycle.program
    sponsor = program.sponsor if program is not None else None
    return CycleResponse(
        id=cycle.id,
        program_id=cycle.program_id,
        name=cycle.display_name or (program.name if program else ""),
        description=program.description if program else "",
        sponsor=sponsor.name if sponsor is not None else _UNKNOWN_SPONSOR,
        type=scholarship_type_of(cycle.scholarship_type, settings.DEFAULT_SCHOLARSHIP_TYPE),
        amount=cycle.amount,
        academic_year=cycle.academic_year,
        application_start_date=cycle.application_start_date,
        application_deadline=cycle.application_end_date,
        eligibility_criteria=list_eligibility_criteria(cycle),
        max_recipients=cycle.total_slots,
        available_slots=cycle.available_slots,
        current_applications=active_count,
        remaining_slots=slots.remaining_slots(cycle.total_slots, active_count),
        duration_months=cycle.duration_months,
        disbursement_schedule=cycle.disbursement_schedule,
        status=derive_external_status(
            cycle.persisted_status,
            cycle.application_start_date,
            cycle.application_end_date,
            now,
        ),
        created_at=cycle.created_at,
        updated_at=cycle.updated_at,
    )


async def _respond(session: AsyncSession, cycle: Cycle) -> CycleResponse:
    active = await slots.count_active_applications(session, cycle.id)
    return _build_cycle_response(cycle, active, datetime.now(UTC))


async def _respond_many(session: AsyncSession, cycles: list[Cycle]) -> list[CycleResponse]:
    counts = await slots.count_active_applications_for(session, [c.id for c in cycles])
    now = datetime.now(UTC)
    return [_build_cycle_response(c, counts.get(c.id, 0), now) for c in cycles]


@router.post(
    "/",
    response_model=CycleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def create_cycle(
    body: CycleCreate,
    session: AsyncSession = Depends(get_db),
) -> CycleResponse:
    """Create a cycle under an existing program or a sponsor's program."""
    cycle = await cycle_service.create_cycle(
        session,
        sponsor_id=body.sponsor_id,
        program_id=body.program_id,
        name=body.name,
        description=body.description,
        amount=body.amount,
        max_recipients=body.max_recipients,
        application_start_date=body.application_start_date,
        application_end_date=body.application_deadline,
        eligibility_criteria=body.eligibility_criteria,
        scholarship_type=body.type,
        status=body.status,
        academic_year=body.academic_year,
        display_name=body.display_name,
        duration_months=body.duration_months,
        disbursement_schedule=body.disbursement_schedule,
    )
    return await _respond(session, cycle)


@router.get("/", response_model=CycleListResponse)
async def list_cycles(
    _user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    status: ExternalCycleStatus | None = None,
    scholarship_type: ScholarshipType | None = Query(default=None, alias="type"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
) -> CycleListResponse:
    """List cycles, newest academic year first."""
    cycles, total = await cycle_service.list_cycles(
        session,
        status=status,
        scholarship_type=scholarship_type,
        offset=(page - 1) * limit,
        limit=limit,
        default_type=settings.DEFAULT_SCHOLARSHIP_TYPE,
    )
    return CycleListResponse(
        data=await _respond_many(session, cycles),
        pagination=Pagination.build(total=total, page=page, limit=limit),
    )


@router.get("/{cycle_id}", response_model=CycleResponse)
async def get_cycle(
    cycle_id: int,
    _user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CycleResponse:
    cycle = await cycle_service.get_cycle(session, cycle_id)
    return await _respond(session, cycle)


@router.put(
    "/{cycle_id}",
    response_model=CycleResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def update_cycle(
    cycle_id: int,
    body: CycleUpdate,
    session: AsyncSession = Depends(get_db),
) -> CycleResponse:
    """Partially update a cycle; omitted fields are left unchanged."""
    updates = body.model_dump(exclude_unset=True)
    if "application_deadline" in updates:
        updates["application_end_date"] = updates.pop("application_deadline")
    if "type" in updates:
        updates["scholarship_type"] = updates.pop("type")
    cycle = await cycle_service.update_cycle(session, cycle_id, **updates)
    return await _respond(session, cycle)


@router.delete(
    "/{cycle_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def delete_cycle(
    cycle_id: int,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a cycle with its criteria and applications."""
    await cycle_service.delete_cycle(session, cycle_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@programs_router.get("/{program_id}/cycles", response_model=list[CycleResponse])
async def list_program_cycles(
    program_id: int,
    _user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[CycleResponse]:
    cycles = await cycle_service.list_program_cycles(session, program_id)
    return await _respond_many(session, cycles)


async def _program_response(session: AsyncSession, program: Program) -> ProgramResponse:
    sponsor = program.sponsor
    return ProgramResponse(
        id=program.id,
        sponsor_id=program.sponsor_id,
        sponsor=sponsor.name if sponsor is not None else _UNKNOWN_SPONSOR,
        name=program.name,
        description=program.description or "",
        default_amount=program.default_amount,
        default_slots=program.default_slots,
        start_year=program.start_year,
        cycles=await _respond_many(session, program_service.ordered_cycles(program)),
        created_at=program.created_at,
        updated_at=program.updated_at,
    )


@programs_router.get("/", response_model=ProgramListResponse)
async def list_programs(
    _user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    status: ExternalCycleStatus | None = None,
    scholarship_type: ScholarshipType | None = Query(default=None, alias="type"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
) -> ProgramListResponse:
    """List programs with their cycles; filters keep programs with a matching cycle."""
    programs, total = await program_service.list_programs(
        session,
        status=status,
        scholarship_type=scholarship_type,
        offset=(page - 1) * limit,
        limit=limit,
        default_type=settings.DEFAULT_SCHOLARSHIP_TYPE,
    )
    return ProgramListResponse(
        data=[await _program_response(session, p) for p in programs],
        pagination=Pagination.build(total=total, page=page, limit=limit),
    )


@programs_router.get("/{program_id}", response_model=ProgramResponse)
async def get_program(
    program_id: int,
    _user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ProgramResponse:
    program = await program_service.get_program(session, program_id)
    return await _program_response(session, program)

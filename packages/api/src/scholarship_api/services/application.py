# This project was developed with assistance from AI tools.
"""Application service with role-based data scope filtering.

Every query is filtered through the caller's DataScope so students see only
their own applications while admins and reviewers see all.  Status changes
go through ``ApplicationStatus.valid_transitions()`` and each one leaves a
history row behind.
"""

import logging
import uuid
from datetime import UTC, datetime

from scholarship_db import Application, ApplicationDocument, ApplicationReview, Cycle
from scholarship_db.enums import ApplicationStatus, HistoryAction
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.application import AcademicInfo, AdditionalInfo, FinancialInfo
from ..schemas.auth import UserContext
from . import cascade, slots
from .errors import (
    DuplicateApplicationError,
    InvalidTransitionError,
    MissingRequiredFieldError,
    NotFoundError,
)
from .history import record_history
from .scope import apply_data_scope

logger = logging.getLogger(__name__)

_INACTIVE = sorted(ApplicationStatus.inactive_statuses(), key=lambda s: s.value)


def generate_application_number(now: datetime | None = None) -> str:
    """``APP`` + UTC timestamp to the second + 8 random hex chars."""
    now = now or datetime.now(UTC)
    return f"APP{now:%Y%m%d%H%M%S}{uuid.uuid4().hex[:8].upper()}"


def _check_transition(application: Application, new_status: ApplicationStatus) -> ApplicationStatus:
    current = application.status or ApplicationStatus.DRAFT
    allowed = ApplicationStatus.valid_transitions().get(current, frozenset())
    if new_status not in allowed:
        logger.warning(
            "Rejected transition on application %s: %s -> %s",
            application.id, current.value, new_status.value,
        )
        raise InvalidTransitionError(
            f"Cannot transition from '{current.value}' to '{new_status.value}'. "
            f"Allowed: {sorted(s.value for s in allowed) if allowed else 'none (terminal status)'}."
        )
    return current


async def get_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    for_update: bool = False,
) -> Application:
    """Return a single application if visible to the current user.

    Out-of-scope applications raise NotFoundError just like missing ones, so
    a student cannot discover other students' application ids.
    """
    stmt = (
        select(Application)
        .options(selectinload(Application.documents))
        .where(Application.id == application_id)
        .execution_options(populate_existing=True)
    )
    stmt = apply_data_scope(stmt, user.data_scope)
    if for_update:
        stmt = stmt.with_for_update(of=Application)
    application = (await session.execute(stmt)).scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application", application_id)
    return application


def _apply_filters(stmt, status, cycle_id, applicant_id):
    if status is not None:
        stmt = stmt.where(Application.status == status)
    if cycle_id is not None:
        stmt = stmt.where(Application.cycle_id == cycle_id)
    if applicant_id is not None:
        stmt = stmt.where(Application.user_id == applicant_id)
    return stmt


async def list_applications(
    session: AsyncSession,
    user: UserContext,
    *,
    status: ApplicationStatus | None = None,
    cycle_id: int | None = None,
    applicant_id: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Application], int]:
    """Return applications visible to the current user, newest first."""
    count_stmt = select(func.count(Application.id))
    count_stmt = apply_data_scope(count_stmt, user.data_scope)
    count_stmt = _apply_filters(count_stmt, status, cycle_id, applicant_id)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(Application)
        .options(selectinload(Application.documents))
        .order_by(Application.created_at.desc(), Application.id.desc())
        .offset(offset)
        .limit(limit)
    )
    stmt = apply_data_scope(stmt, user.data_scope)
    stmt = _apply_filters(stmt, status, cycle_id, applicant_id)
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def _has_active_application(session: AsyncSession, cycle_id: int, applicant_id: str) -> bool:
    stmt = select(Application.id).where(
        Application.cycle_id == cycle_id,
        Application.user_id == applicant_id,
        Application.status.notin_(_INACTIVE),
    )
    return (await session.execute(stmt.limit(1))).first() is not None


async def create_application(
    session: AsyncSession,
    user: UserContext,
    *,
    cycle_id: int | None,
    applicant_id: str | None = None,
    motivation_letter: str | None = None,
    academic_info: AcademicInfo | None = None,
    financial_info: FinancialInfo | None = None,
    document_ids: list[str] | None = None,
) -> Application:
    """Create a DRAFT application against a cycle.

    Students always apply as themselves; staff may name the applicant.  The
    duplicate and capacity checks run while the cycle row is locked, so two
    concurrent creates cannot both take the last slot.

    Raises:
        MissingRequiredFieldError: no cycle or no applicant.
        NotFoundError: the cycle does not exist.
        DuplicateApplicationError: applicant already holds an active application.
        CapacityExceededError: the cycle has no remaining slots.
    """
    if user.data_scope.own_data_only:
        applicant_id = user.user_id
    if cycle_id is None:
        raise MissingRequiredFieldError("cycle_id")
    if not applicant_id:
        raise MissingRequiredFieldError("applicant_id")

    cycle_stmt = select(Cycle).where(Cycle.id == cycle_id).with_for_update()
    cycle = (await session.execute(cycle_stmt)).scalar_one_or_none()
    if cycle is None:
        raise NotFoundError("Cycle", cycle_id)

    if await _has_active_application(session, cycle_id, applicant_id):
        logger.warning("Duplicate application by %s for cycle %s", applicant_id, cycle_id)
        raise DuplicateApplicationError(
            f"Applicant {applicant_id} already has an active application for cycle {cycle_id}"
        )
    await slots.ensure_capacity(session, cycle)

    info = AdditionalInfo().merged_with(academic=academic_info, financial=financial_info)
    application = Application(
        application_number=generate_application_number(),
        user_id=applicant_id,
        cycle_id=cycle_id,
        motivation_letter=motivation_letter,
        additional_info=info.to_storage(),
        status=ApplicationStatus.DRAFT,
    )
    session.add(application)
    await session.flush()

    for document_id in dict.fromkeys(document_ids or []):
        session.add(
            ApplicationDocument(
                application_id=application.id, document_id=document_id, is_required=True
            )
        )
    await record_history(
        session,
        application_id=application.id,
        action=HistoryAction.CREATED,
        performed_by=user.user_id,
        to_status=ApplicationStatus.DRAFT,
    )

    app_id = application.id  # capture before commit
    number = application.application_number
    await session.commit()
    logger.info("Application %s (%s) created for cycle %s", app_id, number, cycle_id)
    return await get_application(session, user, app_id)


async def update_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    **updates,
) -> Application:
    """Edit a DRAFT application.

    Recognized keys: motivation_letter, academic_info, financial_info.  The
    academic and financial records are merged field by field into what is
    already stored; fields the caller did not set are left alone.
    """
    application = await get_application(session, user, application_id, for_update=True)
    if application.status != ApplicationStatus.DRAFT:
        raise InvalidTransitionError(
            f"Only draft applications can be updated (status is '{application.status.value}')"
        )

    if "motivation_letter" in updates:
        application.motivation_letter = updates["motivation_letter"]
    academic = updates.get("academic_info")
    financial = updates.get("financial_info")
    if academic is not None or financial is not None:
        stored = AdditionalInfo.from_storage(application.additional_info)
        application.additional_info = stored.merged_with(
            academic=academic, financial=financial
        ).to_storage()

    await record_history(
        session,
        application_id=application_id,
        action=HistoryAction.UPDATED,
        performed_by=user.user_id,
        notes=", ".join(sorted(updates)) or None,
    )
    await session.commit()
    return await get_application(session, user, application_id)


async def submit_application(
    session: AsyncSession, user: UserContext, application_id: int
) -> Application:
    """DRAFT -> SUBMITTED."""
    application = await get_application(session, user, application_id, for_update=True)
    if application.status != ApplicationStatus.DRAFT:
        raise InvalidTransitionError(
            f"Only draft applications can be submitted (status is '{application.status.value}')"
        )
    previous = _check_transition(application, ApplicationStatus.SUBMITTED)

    application.status = ApplicationStatus.SUBMITTED
    application.submitted_at = datetime.now(UTC)
    await record_history(
        session,
        application_id=application_id,
        action=HistoryAction.SUBMITTED,
        performed_by=user.user_id,
        from_status=previous,
        to_status=ApplicationStatus.SUBMITTED,
    )
    await session.commit()
    logger.info("Application %s submitted by %s", application_id, user.user_id)
    return await get_application(session, user, application_id)


async def review_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    decision: ApplicationStatus | str,
    comments: str | None = None,
    score: int | None = None,
) -> Application:
    """Record a reviewer decision on a SUBMITTED or UNDER_REVIEW application.

    ``decision`` (enum or its string value) must be UNDER_REVIEW, APPROVED or
    REJECTED and a legal transition from the current status.
    """
    try:
        decision = ApplicationStatus(decision)
    except ValueError as exc:
        raise InvalidTransitionError(f"'{decision}' is not an application status") from exc
    if decision not in ApplicationStatus.review_decisions():
        raise InvalidTransitionError(
            f"'{decision.value}' is not a review decision. Allowed: "
            f"{sorted(s.value for s in ApplicationStatus.review_decisions())}."
        )
    application = await get_application(session, user, application_id, for_update=True)
    if application.status not in (ApplicationStatus.SUBMITTED, ApplicationStatus.UNDER_REVIEW):
        raise InvalidTransitionError(
            f"Only submitted or under-review applications can be reviewed "
            f"(status is '{application.status.value}')"
        )
    previous = _check_transition(application, decision)

    now = datetime.now(UTC)
    application.status = decision
    application.decision_notes = comments
    application.decision_by = user.user_id
    application.reviewed_at = now
    application.decision_at = now
    session.add(
        ApplicationReview(
            application_id=application_id,
            reviewer_id=user.user_id,
            decision=decision,
            score=score,
            comments=comments,
        )
    )
    await record_history(
        session,
        application_id=application_id,
        action=HistoryAction.REVIEWED,
        performed_by=user.user_id,
        from_status=previous,
        to_status=decision,
        notes=comments,
    )
    await session.commit()
    logger.info(
        "Application %s reviewed by %s: %s -> %s",
        application_id, user.user_id, previous.value, decision.value,
    )
    return await get_application(session, user, application_id)


async def withdraw_application(
    session: AsyncSession, user: UserContext, application_id: int
) -> Application:
    """Withdraw from DRAFT, SUBMITTED or UNDER_REVIEW. Frees the slot."""
    application = await get_application(session, user, application_id, for_update=True)
    if application.status in (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED):
        raise InvalidTransitionError("Cannot withdraw an already processed application")
    previous = _check_transition(application, ApplicationStatus.WITHDRAWN)

    application.status = ApplicationStatus.WITHDRAWN
    await record_history(
        session,
        application_id=application_id,
        action=HistoryAction.WITHDRAWN,
        performed_by=user.user_id,
        from_status=previous,
        to_status=ApplicationStatus.WITHDRAWN,
    )
    await session.commit()
    logger.info("Application %s withdrawn by %s", application_id, user.user_id)
    return await get_application(session, user, application_id)


async def delete_application(
    session: AsyncSession, user: UserContext, application_id: int
) -> dict[str, int]:
    """Delete an application with its documents, reviews and history."""
    await get_application(session, user, application_id)
    removed = await cascade.delete_application_tree(session, application_id)
    await session.commit()
    logger.info("Application %s deleted by %s with dependents %s", application_id, user.user_id, removed)
    return removed

# This project was developed with assistance from AI tools.
"""Application routes with RBAC enforcement."""

from fastapi import APIRouter, Depends, Query, Response, status
from scholarship_db import Application, get_db
from scholarship_db.enums import ApplicationStatus, UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import (
    AdditionalInfo,
    ApplicationCreate,
    ApplicationHistoryEntry,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationReviewRequest,
    ApplicationUpdate,
)
from ..services import application as app_service
from ..services.history import list_history

router = APIRouter()

_APPLICANT_ROLES = (UserRole.ADMIN, UserRole.STUDENT)
_READER_ROLES = (UserRole.ADMIN, UserRole.REVIEWER, UserRole.STUDENT)


def _build_app_response(app: Application) -> ApplicationResponse:
    """Build ApplicationResponse from ORM object, unpacking the stored details."""
    info = AdditionalInfo.from_storage(app.additional_info)
    return ApplicationResponse(
        id=app.id,
        application_number=app.application_number,
        applicant_id=app.user_id,
        cycle_id=app.cycle_id,
        status=app.status,
        motivation_letter=app.motivation_letter,
        academic_info=info.academic,
        financial_info=info.financial,
        document_ids=[d.document_id for d in app.documents],
        decision_notes=app.decision_notes,
        decision_by=app.decision_by,
        submitted_at=app.submitted_at,
        reviewed_at=app.reviewed_at,
        decision_at=app.decision_at,
        created_at=app.created_at,
        updated_at=app.updated_at,
    )


@router.get(
    "/",
    response_model=ApplicationListResponse,
    dependencies=[Depends(require_roles(*_READER_ROLES))],
)
async def list_applications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    status: ApplicationStatus | None = None,
    cycle_id: int | None = None,
    applicant_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
) -> ApplicationListResponse:
    """List applications visible to the current user's role and data scope."""
    applications, total = await app_service.list_applications(
        session,
        user,
        status=status,
        cycle_id=cycle_id,
        applicant_id=applicant_id,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return ApplicationListResponse(
        data=[_build_app_response(app) for app in applications],
        pagination=Pagination.build(total=total, page=page, limit=limit),
    )


@router.post(
    "/",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_APPLICANT_ROLES))],
)
async def create_application(
    body: ApplicationCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Create a draft application. Students always apply as themselves."""
    app = await app_service.create_application(
        session,
        user,
        cycle_id=body.cycle_id,
        applicant_id=body.applicant_id,
        motivation_letter=body.motivation_letter,
        academic_info=body.academic_info,
        financial_info=body.financial_info,
        document_ids=body.document_ids,
    )
    return _build_app_response(app)


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_READER_ROLES))],
)
async def get_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Get a single application. Returns 404 for out-of-scope resources."""
    app = await app_service.get_application(session, user, application_id)
    return _build_app_response(app)


@router.get(
    "/{application_id}/history",
    response_model=list[ApplicationHistoryEntry],
    dependencies=[Depends(require_roles(*_READER_ROLES))],
)
async def get_application_history(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[ApplicationHistoryEntry]:
    """Chronological history of an application."""
    await app_service.get_application(session, user, application_id)
    entries = await list_history(session, application_id)
    return [ApplicationHistoryEntry.model_validate(e) for e in entries]


@router.put(
    "/{application_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_APPLICANT_ROLES))],
)
async def update_application(
    application_id: int,
    body: ApplicationUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Edit a draft application. Only fields present in the body are applied."""
    updates = {field: getattr(body, field) for field in body.model_fields_set}
    app = await app_service.update_application(session, user, application_id, **updates)
    return _build_app_response(app)


@router.patch(
    "/{application_id}/submit",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_APPLICANT_ROLES))],
)
async def submit_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    app = await app_service.submit_application(session, user, application_id)
    return _build_app_response(app)


@router.patch(
    "/{application_id}/review",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.REVIEWER))],
)
async def review_application(
    application_id: int,
    body: ApplicationReviewRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Record a reviewer decision (UNDER_REVIEW, APPROVED or REJECTED)."""
    app = await app_service.review_application(
        session,
        user,
        application_id,
        decision=body.status,
        comments=body.comments,
        score=body.score,
    )
    return _build_app_response(app)


@router.patch(
    "/{application_id}/withdraw",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_APPLICANT_ROLES))],
)
async def withdraw_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    app = await app_service.withdraw_application(session, user, application_id)
    return _build_app_response(app)


@router.delete(
    "/{application_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def delete_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> Response:
    await app_service.delete_application(session, user, application_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

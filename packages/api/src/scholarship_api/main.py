# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scholarship_db.database import db_service
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .routes import applications, cycles, health, sponsors
from .schemas.error import ErrorResponse
from .services.errors import (
    CapacityExceededError,
    CapacityInvariantViolation,
    ConflictingResourceError,
    DuplicateApplicationError,
    InvalidCycleDatesError,
    InvalidTransitionError,
    MissingRequiredFieldError,
    NotFoundError,
    ScholarshipError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    logger.info(
        "%s starting (auth %s)",
        settings.APP_NAME,
        "DISABLED" if settings.AUTH_DISABLED else f"realm={settings.KEYCLOAK_REALM}",
    )
    yield
    await db_service.dispose()


app = FastAPI(
    title="Scholarship Cycles API",
    description="Funding cycles, applications and reviews for sponsored scholarships",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}

# Most specific first; the first isinstance match wins.
_ENGINE_ERROR_STATUS: tuple[tuple[type[ScholarshipError], int], ...] = (
    (NotFoundError, 404),
    (MissingRequiredFieldError, 422),
    (InvalidCycleDatesError, 422),
    (InvalidTransitionError, 409),
    (DuplicateApplicationError, 409),
    (ConflictingResourceError, 409),
    (CapacityExceededError, 409),
    (CapacityInvariantViolation, 500),
)


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(status_code: int, detail: str, request_id: str, instance: str = "") -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        instance=instance,
    )


def status_for(exc: ScholarshipError) -> int:
    for error_cls, status_code in _ENGINE_ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status_code
    return 500


@app.exception_handler(ScholarshipError)
async def scholarship_error_handler(request: Request, exc: ScholarshipError):
    """Convert engine errors to RFC 7807 Problem Details."""
    request_id = _request_id(request)
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s (request_id=%s): %s", type(exc).__name__, request_id, exc)
        detail = "Internal consistency error."
    else:
        logger.info("%s (request_id=%s): %s", type(exc).__name__, request_id, exc)
        detail = str(exc)
    body = _build_error(status_code, detail, request_id, instance=request.url.path)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    body = _build_error(422, str(exc.errors()), _request_id(request))
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(sponsors.router, prefix="/api/sponsors", tags=["sponsors"])
app.include_router(cycles.router, prefix="/api/cycles", tags=["cycles"])
app.include_router(cycles.programs_router, prefix="/api/programs", tags=["cycles"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": f"Welcome to the {settings.APP_NAME} API"}

# This project was developed with assistance from AI tools.
"""Liveness and database health check."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from scholarship_db import DatabaseService, get_db_service

from ..core.config import settings

router = APIRouter()


@router.get("/")
async def health(db_service: DatabaseService = Depends(get_db_service)) -> JSONResponse:
    """Report service liveness and whether the database answers."""
    database_ok = await db_service.health_check()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "ok" if database_ok else "degraded",
            "service": settings.APP_NAME,
            "database": "ok" if database_ok else "unavailable",
        },
    )

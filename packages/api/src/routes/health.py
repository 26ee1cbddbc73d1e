# This project was developed with assistance from AI tools.
"""Liveness and dependency health endpoint."""

from db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends

from .. import __version__
from ..core.config import settings
from ..schemas import HealthResponse

router = APIRouter()


@router.get("/", response_model=list[HealthResponse])
async def health_check(
    db_service: DatabaseService = Depends(get_db_service),
) -> list[HealthResponse]:
    """Report API liveness plus database connectivity."""
    db_health = await db_service.health_check()
    return [
        HealthResponse(
            name=settings.APP_NAME,
            status="healthy",
            message="API is running",
            version=__version__,
        ),
        HealthResponse(**db_health),
    ]

"""Health check endpoints."""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from clinic_booking.config import settings
from clinic_booking.core.redis_client import check_redis_connection
from clinic_booking.database import check_database_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health check response including backing stores."""

    database: str
    redis: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Liveness check; does not touch the database or Redis."""
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(response: Response) -> DetailedHealthResponse:
    """
    Readiness check covering the database and the session store.

    Responds with 503 when either dependency is unreachable, since no
    booking or login can succeed without both.
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    if not (db_healthy and redis_healthy):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return DetailedHealthResponse(
        status="healthy" if db_healthy and redis_healthy else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        redis="healthy" if redis_healthy else "unhealthy",
    )


@router.get("/ping", status_code=status.HTTP_200_OK, summary="Simple ping")
async def ping() -> dict[str, str]:
    """Simple ping endpoint."""
    return {"message": "pong"}

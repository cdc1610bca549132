# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
#
# Startup failures (database connection, uploads directory) never stop the
# server, so readiness is where they become visible.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import DatabaseDep, SettingsDep

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str
    uploads: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(database: DatabaseDep, app_settings: SettingsDep):
    """
    Readiness check endpoint.

    Reports "degraded" when the database isn't connected or the uploads
    directory is missing. Always answers 200: the API keeps serving either way.
    """
    uploads_path = app_settings.uploads_path

    health = database.health()
    database_check = health["status"]
    if health["error"]:
        database_check = f"{database_check}: {health['error'][:50]}"

    checks = ChecksResponse(
        database=database_check,
        uploads="healthy" if uploads_path.is_dir() else "missing",
    )

    all_healthy = database.is_connected and checks.uploads == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return LivenessResponse(
        status="alive",
        timestamp=_now(),
    )

# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import ClientsDep

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    backend: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check(clients: ClientsDep):
    """
    Readiness check endpoint.

    Touches the photos table and the uploads bucket.
    """
    checks = ChecksResponse(backend="unknown")

    try:
        clients.supabase.ping(settings.UPLOADS_BUCKET)
        checks.backend = "healthy"
    except Exception as e:
        checks.backend = f"unhealthy: {str(e)[:50]}"

    return ReadinessResponse(
        status="ready" if checks.backend == "healthy" else "degraded",
        checks=checks,
        timestamp=_now(),
    )

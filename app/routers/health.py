# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.utils import utc_now_iso

router = APIRouter()

VERSION = "1.0.0"


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
    airtable: str
    supabase: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


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
        timestamp=utc_now_iso(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check():
    """
    Readiness check endpoint.

    Reports whether Airtable credentials are present and whether Supabase
    is configured and reachable. Airtable itself is not called, so the
    probe never spends rate-limit budget.
    """
    from lib.airtable_client import get_credentials
    from lib.supabase_client import SupabaseClient

    checks = ChecksResponse(airtable="unknown", supabase="unknown")

    checks.airtable = "configured" if get_credentials().complete else "not configured"

    if not settings.supabase_configured:
        checks.supabase = "not configured"
    else:
        try:
            SupabaseClient.ping()
            checks.supabase = "healthy"
        except Exception as e:
            checks.supabase = f"unhealthy: {str(e)[:50]}"

    # Overall status
    all_healthy = checks.airtable == "configured" and checks.supabase == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=utc_now_iso(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return LivenessResponse(
        status="alive",
        timestamp=utc_now_iso(),
    )

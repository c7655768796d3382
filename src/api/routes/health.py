"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Any, Dict

from fastapi import APIRouter

from config.database import get_supabase_client_optional
from config.settings import get_settings


router = APIRouter(tags=["Health"])

SERVICE_NAME = "archetype-matching-api"


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
    }


@router.get("/health/detailed")
async def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check with dependency status.

    Checks that the archetype catalog table answers a one-row query.
    """
    settings = get_settings()

    catalog_status = "unknown"
    catalog_error = None
    try:
        client = get_supabase_client_optional()
        if client:
            result = client.table(settings.archetype_table).select("id").limit(1).execute()
            catalog_status = "connected" if result.data else "empty"
        else:
            catalog_status = "not_configured"
    except Exception as e:
        catalog_status = "error"
        catalog_error = str(e)

    return {
        "status": "healthy" if catalog_status == "connected" else "degraded",
        "service": SERVICE_NAME,
        "environment": settings.environment,
        "checks": {
            "config": "ok",
            "catalog": {
                "table": settings.archetype_table,
                "status": catalog_status,
                "error": catalog_error,
            },
        },
    }


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """Readiness probe: the Supabase client can be built."""
    client = get_supabase_client_optional()
    if client is None:
        return {"status": "not_ready", "reason": "database_not_configured"}

    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}

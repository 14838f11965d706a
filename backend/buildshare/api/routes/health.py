"""Health & Readiness Checks — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the database is unreachable or the
      expiry triggers are missing (readiness)
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import buildshare.infrastructure.database as database
from buildshare import __version__
from buildshare.infrastructure.ttl_policy import ttl_policy_installed

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


def _not_ready(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness check. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "buildshare-api",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check — database connectivity and TTL policy presence."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")
    try:
        ttl_ok = await ttl_policy_installed(manager.engine)
    except Exception as e:
        logger.error(f"TTL policy check failed: {e}", extra={"operation": "ready"})
        ttl_ok = False
    if not ttl_ok:
        return _not_ready("ttl_policy_missing")
    return {
        "status": "ready",
        "checks": {"database": "healthy", "ttl_policy": "installed"},
    }

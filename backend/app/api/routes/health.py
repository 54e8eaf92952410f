"""Health Routes — liveness and readiness for the container platform.

Invariants:
    - GET /api/v1/health/ answers 200 while the process runs
    - GET /api/v1/health/ready answers 503 until the database responds to SELECT 1
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "packstation-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "up", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness():
    """Readiness includes a database round trip."""
    manager = database.db_manager
    latency_ms = await manager.ping() if manager is not None else None
    if latency_ms is None:
        logger.warning("readiness: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "down", "checks": {"database": {"status": "down"}}},
        )
    return {
        "status": "up",
        "checks": {"database": {"status": "up", "latency_ms": latency_ms}},
    }

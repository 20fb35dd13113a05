"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from partsledger import __version__
from partsledger.application.dto.responses import HealthResponse
from partsledger.config import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

# Track startup time
_start_time = time.time()


async def _database_status() -> str:
    from partsledger.infrastructure.storage.sqlite import get_connection

    try:
        async with get_connection() as conn:
            await conn.execute("SELECT 1")
        return "ok"
    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        return "unavailable"


@router.get("/health", response_model=HealthResponse)
@router.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Service health check.

    Returns service status, uptime and database reachability.
    """
    database = await _database_status()
    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        database=database,
    )

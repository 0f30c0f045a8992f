"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from stockwatch import __version__
from stockwatch.application.dto.responses import HealthResponse
from stockwatch.application.monitoring import get_monitoring_loop

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


def _monitoring_running() -> bool:
    monitor = get_monitoring_loop()
    return monitor is not None and monitor.is_running


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Service status, uptime and whether stock monitoring is running."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        monitoring=_monitoring_running(),
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database health check.

    Tests SQLite connectivity.
    """
    from stockwatch.infrastructure.storage.sqlite import get_pool

    db_status = "ok"
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
    except Exception as e:
        db_status = f"error: {e}"

    return HealthResponse(
        status="healthy" if db_status == "ok" else "degraded",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        database=db_status,
        monitoring=_monitoring_running(),
    )

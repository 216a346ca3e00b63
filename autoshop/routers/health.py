"""
Health check routes.
"""
import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from autoshop.config import get_settings
from autoshop.database import engine

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/health", tags=["health"])

STARTED_AT = time.monotonic()


async def check_database() -> dict:
    """Run a trivial query and report how long it took."""
    start = time.perf_counter()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Database health check failed: %s", exc)
        return {"status": "unhealthy", "error": str(exc)}
    return {"status": "healthy", "latency_ms": round((time.perf_counter() - start) * 1000, 2)}


@router.get("/detailed")
async def detailed_health():
    database = await check_database()
    return {
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "version": settings.app_version,
        "uptime_seconds": round(time.monotonic() - STARTED_AT, 1),
        "checks": {"database": database},
    }


@router.get("/ready")
async def readiness():
    database = await check_database()
    if database["status"] != "healthy":
        return JSONResponse(status_code=503, content={"status": "not_ready", "checks": {"database": database}})
    return {"status": "ready"}


@router.get("/live")
async def liveness():
    return {"status": "alive"}

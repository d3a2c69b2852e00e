"""
Health Check Endpoints

- /health       - Basic liveness (app is running)
- /health/ready - Readiness (catalog database and apps directory usable)
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from typing import Dict, Any
import os
import time

from app.core.config import settings
from app.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check catalog database connectivity"""
    start = time.time()
    try:
        from app.core.database import get_session_local
        from sqlalchemy import text

        session_factory = get_session_local()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))

        return {"status": "healthy", "latency_ms": round((time.time() - start) * 1000, 2)}
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "error": str(e),
        }


def check_apps_dir() -> Dict[str, Any]:
    """Generated sites are written under APPS_DIR"""
    apps_dir = settings.APPS_DIR
    writable = apps_dir.is_dir() and os.access(apps_dir, os.W_OK)
    if not writable:
        logger.error(f"[HealthCheck] Apps directory not writable: {apps_dir}")
    return {"status": "healthy" if writable else "unhealthy", "path": str(apps_dir)}


@router.get("")
async def liveness():
    return {"status": "healthy", "service": "vibecoding-backend"}


@router.get("/ready")
async def readiness():
    checks = {
        "database": await check_database(),
        "apps_dir": check_apps_dir(),
    }
    healthy = all(c["status"] == "healthy" for c in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if healthy else "not_ready", "checks": checks},
    )

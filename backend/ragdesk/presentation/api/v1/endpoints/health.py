"""Health endpoints: liveness (no dependencies) and readiness (database ping)."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ragdesk.config import get_settings
from ragdesk.infrastructure.database.session import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate"}


@router.get("/health")
async def health_check() -> dict:
    """Returns the current application health status."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
    }


@router.get("/health/ready")
async def readiness_check(session: AsyncSession = Depends(get_db_session)) -> JSONResponse:
    """503 until the database answers a trivial query."""
    start = time.perf_counter()
    try:
        await session.execute(text("SELECT 1"))
        db_healthy = True
    except SQLAlchemyError as exc:
        logger.warning("Readiness check: database unavailable: %s", exc)
        db_healthy = False

    body = {
        "status": "healthy" if db_healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "response_time_ms": int((time.perf_counter() - start) * 1000),
        "environment": get_settings().app_env,
        "services": {"database": "connected" if db_healthy else "disconnected"},
    }
    return JSONResponse(body, status_code=200 if db_healthy else 503, headers=_NO_CACHE)

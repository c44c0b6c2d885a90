"""Health check endpoints for system monitoring."""

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from govflow import __version__
from govflow.core.config import get_settings
from govflow.db.session import get_async_db
from govflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="System health check",
    description="Check database connectivity and SAM.gov configuration",
    responses={
        200: {
            "description": "System is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "timestamp": "2026-01-15T10:30:00Z",
                        "version": "1.0.0",
                        "environment": "development",
                        "components": {
                            "database": {"status": "healthy", "response_time_ms": 4},
                            "sam_gov": {"status": "configured"},
                        },
                    }
                }
            },
        },
        503: {"description": "Database is unreachable"},
    },
)
async def health_check(db: AsyncSession = Depends(get_async_db)):
    """
    Health check for the service.

    Returns HTTP 200 when the database answers, HTTP 503 otherwise. A missing
    SAM.gov key is reported but does not make the service unhealthy.
    """
    settings = get_settings()
    database = await _check_database_health(db)
    healthy = database["status"] == "healthy"

    result: dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utc_now().isoformat(),
        "version": __version__,
        "environment": settings.app_env,
        "components": {
            "database": database,
            "sam_gov": {
                "status": "configured" if settings.sam_gov_configured else "not_configured"
            },
        },
    }

    if not healthy:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=result)
    return result


async def _check_database_health(db: AsyncSession) -> dict[str, Any]:
    """Check database connectivity and response time."""
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        return {"status": "unhealthy", "error": "Database connection failed"}
    return {
        "status": "healthy",
        "response_time_ms": round((time.perf_counter() - start) * 1000),
    }

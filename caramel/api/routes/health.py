"""Health Probe — database round-trip.

Invariants:
    - 200 with status "healthy" when the query succeeds
    - 500 with status "error" and the failure message otherwise; never raises
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from caramel.core.errors import DatabaseError
from caramel.infrastructure.database import DatabaseSessionManager, get_db

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health_check(db: DatabaseSessionManager = Depends(get_db)):
    """Readiness probe — includes database connectivity."""
    try:
        row = await db.health_check()
    except DatabaseError as e:
        logger.error(f"Health check failed: {e.message}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "database": "disconnected",
                "error": e.details or e.message,
            },
        )
    return {
        "status": "healthy",
        "database": "connected",
        "timestamp": row.get("server_time"),
        "database_version": row.get("server_version"),
    }

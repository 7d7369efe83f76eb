"""Site Settings — GET /api/settings."""

import logging

from fastapi import APIRouter, Depends

from caramel.core.errors import DatabaseError, OperationFailedError
from caramel.infrastructure.database import DatabaseSessionManager, get_db
from caramel.services.settings import fetch_settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
async def get_settings_map(db: DatabaseSessionManager = Depends(get_db)):
    try:
        settings = await fetch_settings(db)
    except DatabaseError as e:
        logger.error(f"Settings fetch error: {e.message}")
        raise OperationFailedError("Settings fetch failed", e.details) from e
    return {"success": True, "settings": settings}

"""Preorders — POST /api/preorders."""

import logging

from fastapi import APIRouter, Depends

from caramel.core.errors import (
    DatabaseError, InvalidRequestError, OperationFailedError,
)
from caramel.infrastructure.database import DatabaseSessionManager, get_db
from caramel.schemas.preorder import PreorderCreate, PreorderCreated
from caramel.services.preorders import create_preorder

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/preorders", tags=["preorders"])


@router.post("", response_model=PreorderCreated)
async def post_preorder(
    body: PreorderCreate, db: DatabaseSessionManager = Depends(get_db),
):
    """Create an event preorder; customer, eventType and eventDate required."""
    if body.missing_required:
        raise InvalidRequestError("Required fields missing")
    try:
        return await create_preorder(db, body)
    except DatabaseError as e:
        logger.error(f"Preorder creation error: {e.message}")
        raise OperationFailedError(
            "Preorder creation failed", e.details,
        ) from e
    except Exception as e:
        logger.error(f"Preorder creation error: {e}", exc_info=True)
        raise OperationFailedError("Preorder creation failed", str(e)) from e

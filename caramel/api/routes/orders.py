"""Orders — POST /api/orders.

Invariants:
    - Empty or missing items → 400 before any connection is borrowed
    - Any failure inside the transaction → 500 "Order creation failed"
      (rollback and connection release happen in the pool layer)
"""

import logging

from fastapi import APIRouter, Depends

from caramel.core.errors import (
    DatabaseError, InvalidRequestError, OperationFailedError,
)
from caramel.infrastructure.database import DatabaseSessionManager, get_db
from caramel.schemas.order import OrderCreate, OrderCreated
from caramel.services.orders import create_order

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderCreated)
async def post_order(
    body: OrderCreate, db: DatabaseSessionManager = Depends(get_db),
):
    """Create an order with its items in a single transaction."""
    if not body.has_items:
        raise InvalidRequestError("Order must contain items")
    try:
        return await create_order(db, body)
    except DatabaseError as e:
        logger.error(f"Order creation error: {e.message}")
        raise OperationFailedError("Order creation failed", e.details) from e
    except Exception as e:
        logger.error(f"Order creation error: {e}", exc_info=True)
        raise OperationFailedError("Order creation failed", str(e)) from e

"""Preorder Creation — customer merge then a single preorder row.

Invariants:
    - No shared transaction: the customer merge commits on its own before the
      preorder insert runs (a failed insert leaves the merged customer in place)
    - On phone conflict only name (and updated_at) is merged; email is kept
    - Callers must reject bodies missing customer/event_type/event_date first
"""

import logging

from sqlalchemy import insert

from caramel.infrastructure.database import DatabaseSessionManager
from caramel.models import Preorder
from caramel.schemas.preorder import PreorderCreate, PreorderCreated
from caramel.services.customers import PREORDER_MERGE_COLUMNS, customer_upsert

logger = logging.getLogger(__name__)


async def create_preorder(
    db: DatabaseSessionManager, preorder: PreorderCreate,
) -> PreorderCreated:
    """Persist a preorder. Raises DatabaseError on failure."""
    if preorder.missing_required:
        raise ValueError("create_preorder requires customer, event type and date")

    customer = preorder.customer
    customer_id = None
    if customer.phone:
        row = await db.fetch_one(customer_upsert(
            db.dialect_name,
            {
                "name": customer.name,
                "phone": customer.phone,
                "email": customer.email,
            },
            PREORDER_MERGE_COLUMNS,
        ))
        customer_id = row["id"]

    row = await db.fetch_one(
        insert(Preorder)
        .values(
            customer_id=customer_id,
            event_type=preorder.event_type,
            event_date=preorder.event_date,
            event_time=preorder.event_time,
            guest_count=preorder.guest_count,
            budget_range=preorder.budget_range,
            selected_desserts=preorder.selected_desserts,
            special_requests=preorder.special_requests,
        )
        .returning(Preorder.id),
    )
    preorder_id = row["id"]
    logger.info("Preorder created", extra={"preorder_id": preorder_id})
    return PreorderCreated(preorder_id=preorder_id)

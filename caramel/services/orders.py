"""Order Creation — customer merge, order row and line items in one transaction.

Invariants:
    - All statements run on one connection between BEGIN and COMMIT; any
      failure rolls back every row written so far (customer merge included)
    - The connection is released exactly once, on success and on failure
    - Each item row stores total_price = quantity * price computed here
    - Orders are created with status "new"
    - Callers must reject empty item lists before calling create_order

Design Decisions:
    - One INSERT per item (not executemany): a failing item surfaces its own
      driver error and aborts the transaction at that point
"""

import logging

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from caramel.core.order_numbers import generate_order_number
from caramel.infrastructure.database import DatabaseSessionManager
from caramel.models import Order, OrderItem
from caramel.models.order import ORDER_STATUS_NEW
from caramel.schemas.order import CustomerIn, OrderCreate, OrderCreated, OrderItemIn
from caramel.services.customers import ORDER_MERGE_COLUMNS, customer_upsert

logger = logging.getLogger(__name__)


async def create_order(
    db: DatabaseSessionManager, order: OrderCreate,
) -> OrderCreated:
    """Persist order + items atomically. Raises DatabaseError on failure."""
    if not order.has_items:
        raise ValueError("create_order requires at least one item")

    async with db.transaction() as session:
        customer_id = None
        if order.customer and order.customer.phone:
            customer_id = await _merge_customer(
                session, db.dialect_name, order.customer,
            )

        result = await session.execute(
            insert(Order)
            .values(
                customer_id=customer_id,
                order_number=generate_order_number(),
                total_amount=order.total_amount,
                notes=order.notes,
                delivery_address=order.delivery_address,
                delivery_date=order.delivery_date,
                status=ORDER_STATUS_NEW,
            )
            .returning(Order.id, Order.order_number),
        )
        created = result.one()

        for item in order.items:
            await _insert_item(session, created.id, item)

    logger.info(
        "Order created",
        extra={
            "order_id": created.id,
            "order_number": created.order_number,
            "item_count": len(order.items),
        },
    )
    return OrderCreated(
        order_id=created.id, order_number=created.order_number,
    )


async def _merge_customer(
    session: AsyncSession, dialect_name: str, customer: CustomerIn,
) -> int:
    result = await session.execute(customer_upsert(
        dialect_name,
        {
            "name": customer.name,
            "phone": customer.phone,
            "email": customer.email,
            "address": customer.address,
        },
        ORDER_MERGE_COLUMNS,
    ))
    return result.scalar_one()


async def _insert_item(
    session: AsyncSession, order_id: int, item: OrderItemIn,
) -> None:
    await session.execute(
        insert(OrderItem).values(
            order_id=order_id,
            product_id=item.id,
            product_name=item.name,
            quantity=item.quantity,
            price=item.price,
            total_price=item.line_total,
        ),
    )

"""Order Schemas — POST /api/orders body and response.

Invariants:
    - items may be absent or empty at parse time; the route rejects that with
      "Order must contain items" before any database work
    - OrderItemIn.line_total is quantity * price (Decimal, no float rounding)
    - total_amount defaults to the sum of line totals when the client omits it
"""

from datetime import date
from decimal import Decimal

from pydantic import Field, field_validator, model_validator

from caramel.schemas.base import CamelModel, blank_to_none


class CustomerIn(CamelModel):
    """Customer details; phone is the merge key, without it no row is written."""
    name: str = Field(min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=32)
    email: str | None = Field(None, max_length=200)
    address: str | None = None

    @field_validator("phone", "email", "address", mode="before")
    @classmethod
    def optional_blank(cls, v):
        return blank_to_none(v)


class OrderItemIn(CamelModel):
    """Cart line — product id/name snapshot with unit price."""
    id: int | None = None
    name: str = Field(min_length=1, max_length=200)
    quantity: int = Field(ge=1)
    price: Decimal = Field(ge=0)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class OrderCreate(CamelModel):
    customer: CustomerIn | None = None
    items: list[OrderItemIn] | None = None
    total_amount: Decimal | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=5000)
    delivery_address: str | None = None
    delivery_date: date | None = None

    @field_validator(
        "notes", "delivery_address", "delivery_date", mode="before",
    )
    @classmethod
    def optional_blank(cls, v):
        return blank_to_none(v)

    @model_validator(mode="after")
    def default_total(self):
        if self.total_amount is None and self.items:
            self.total_amount = sum(
                (item.line_total for item in self.items), Decimal("0"),
            )
        return self

    @property
    def has_items(self) -> bool:
        return bool(self.items)


class OrderCreated(CamelModel):
    success: bool = True
    order_id: int
    order_number: str
    message: str = "Order created successfully"

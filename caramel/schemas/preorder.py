"""Preorder Schemas — POST /api/preorders body and response.

Invariants:
    - customer, event_type and event_date are optional at parse time so the
      route can answer "Required fields missing" instead of a field-level error
"""

from datetime import date, time
from typing import Any

from pydantic import Field, field_validator

from caramel.schemas.base import CamelModel, blank_to_none


class PreorderCustomerIn(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=32)
    email: str | None = Field(None, max_length=200)

    @field_validator("phone", "email", mode="before")
    @classmethod
    def optional_blank(cls, v):
        return blank_to_none(v)


class PreorderCreate(CamelModel):
    customer: PreorderCustomerIn | None = None
    event_type: str | None = Field(None, max_length=100)
    event_date: date | None = None
    event_time: time | None = None
    guest_count: int | None = Field(None, ge=1)
    budget_range: str | None = Field(None, max_length=100)
    selected_desserts: list[Any] | None = None
    special_requests: str | None = Field(None, max_length=5000)

    @field_validator(
        "event_type", "event_date", "event_time", "budget_range",
        "special_requests", mode="before",
    )
    @classmethod
    def optional_blank(cls, v):
        return blank_to_none(v)

    @property
    def missing_required(self) -> bool:
        return (
            self.customer is None
            or self.event_type is None
            or self.event_date is None
        )


class PreorderCreated(CamelModel):
    success: bool = True
    preorder_id: int
    message: str = "Preorder created successfully"

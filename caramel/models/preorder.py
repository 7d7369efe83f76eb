"""Preorder table — event catering requests, a single row with no children."""

from datetime import date, datetime, time, timezone

from sqlalchemy import (
    JSON, Date, DateTime, ForeignKey, Integer, String, Text, Time,
)
from sqlalchemy.orm import Mapped, mapped_column

from caramel.db.base import Base


class Preorder(Base):
    __tablename__ = "preorders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
    )
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    event_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    guest_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    budget_range: Mapped[str | None] = mapped_column(
        String(100), nullable=True,
    )
    # JSON list of dessert names/ids as submitted by the client
    selected_desserts: Mapped[list | None] = mapped_column(
        JSON, nullable=True,
    )
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

"""Booking order records."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from huntbook.db.base import Base
from huntbook.models.mixins import TimestampMixin

JSONB_TYPE = JSONB().with_variant(JSON(), "sqlite")


class OrderStatus(str, enum.Enum):
    """Lifecycle states driven by the external payment flow."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class Order(TimestampMixin, Base):
    """Durable receipt of a committed reservation."""

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("party_size >= 1", name="party_size_positive"),
        CheckConstraint("computed_price >= 0", name="computed_price_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[str | None] = mapped_column(String(128), index=True)
    customer: Mapped[dict[str, Any]] = mapped_column(
        JSONB_TYPE, default=dict, nullable=False
    )
    dates: Mapped[list[str]] = mapped_column(JSONB_TYPE, nullable=False)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    add_on_dates: Mapped[list[str]] = mapped_column(
        JSONB_TYPE, default=list, nullable=False
    )
    computed_price: Mapped[int] = mapped_column(Integer, nullable=False)
    price_breakdown: Mapped[dict[str, Any]] = mapped_column(
        JSONB_TYPE, default=dict, nullable=False
    )
    rate_table_snapshot: Mapped[dict[str, Any]] = mapped_column(
        JSONB_TYPE, nullable=False
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False
    )
    payment_reference: Mapped[str | None] = mapped_column(String(255))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

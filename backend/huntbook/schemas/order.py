"""Pydantic schemas for orders."""

from __future__ import annotations

import datetime
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from huntbook.models.order import OrderStatus
from huntbook.schemas.booking import BookingSelection


class OrderCreate(BookingSelection):
    """Checkout payload; any client-side price is ignored."""

    customer_id: str | None = Field(default=None, max_length=128)
    customer: dict[str, Any] = Field(default_factory=dict)


class OrderRead(BaseModel):
    """Serialized order representation."""

    id: uuid.UUID
    customer_id: str | None = None
    customer: dict[str, Any]
    dates: list[datetime.date]
    party_size: int
    add_on_dates: list[datetime.date]
    computed_price: int
    price_breakdown: dict[str, Any]
    rate_table_snapshot: dict[str, Any]
    status: OrderStatus
    payment_reference: str | None = None
    paid_at: datetime.datetime | None = None
    cancelled_at: datetime.datetime | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentCallback(BaseModel):
    """Body sent by the payment flow when an order settles."""

    payment_reference: str | None = Field(default=None, max_length=255)


class RejectionRead(BaseModel):
    """Structured reason a reservation was not committed."""

    reason: str
    message: str
    dates: list[datetime.date] = Field(default_factory=list)

"""Schemas for booking selections and quotes."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field

from huntbook.services.pricing_service import LineKind


class BookingSelection(BaseModel):
    """Dates, party size and add-on days picked by a customer."""

    dates: list[datetime.date] = Field(min_length=1)
    party_size: int = Field(ge=1)
    add_on_dates: list[datetime.date] = Field(default_factory=list)


class PricingLineRead(BaseModel):
    """Per-person charge covering one or more dates."""

    kind: LineKind
    description: str
    dates: list[datetime.date]
    amount_per_person: int


class QuoteRead(BaseModel):
    """Itemized quote for a booking selection."""

    items: list[PricingLineRead]
    dates: list[datetime.date]
    party_size: int
    per_person_total: int
    hunting_total: int
    add_on_days: int
    add_on_rate_per_day: int
    add_on_total: int
    total: int

    model_config = ConfigDict(from_attributes=True)

"""Schemas for the availability calendar."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict


class DayAvailabilityRead(BaseModel):
    """Capacity view of one calendar day."""

    day: datetime.date
    hunters_booked: int
    add_on_booked: bool
    capacity: int | None = None
    remaining: int | None = None
    in_season: bool | None = None
    add_on_available: bool
    blocked: bool

    model_config = ConfigDict(from_attributes=True)


class AvailabilityResponse(BaseModel):
    """Per-day availability for a date range."""

    start: datetime.date
    end: datetime.date
    party_size: int
    season_active: bool
    first_selectable_day: datetime.date
    days: list[DayAvailabilityRead]

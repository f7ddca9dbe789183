"""Schemas for season rate table management."""

from __future__ import annotations

import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SeasonBase(BaseModel):
    """Shared season rate table fields."""

    name: str = Field(min_length=1, max_length=120)
    season_start: datetime.date
    season_end: datetime.date
    weekday_rate: int = Field(ge=0)
    off_season_rate: int | None = Field(default=None, ge=0)
    weekend_single_day: int = Field(ge=0)
    weekend_two_consecutive_days: int = Field(ge=0)
    weekend_three_day_combo: int = Field(ge=0)
    add_on_rate_per_day: int = Field(ge=0)
    max_capacity_per_day: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> "SeasonBase":
        if self.season_start > self.season_end:
            raise ValueError("season_start must not be after season_end")
        return self


class SeasonCreate(SeasonBase):
    """Payload for storing a new season."""

    activate: bool = False


class SeasonUpdate(BaseModel):
    """Mutable season fields."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    season_start: datetime.date | None = None
    season_end: datetime.date | None = None
    weekday_rate: int | None = Field(default=None, ge=0)
    off_season_rate: int | None = Field(default=None, ge=0)
    weekend_single_day: int | None = Field(default=None, ge=0)
    weekend_two_consecutive_days: int | None = Field(default=None, ge=0)
    weekend_three_day_combo: int | None = Field(default=None, ge=0)
    add_on_rate_per_day: int | None = Field(default=None, ge=0)
    max_capacity_per_day: int | None = Field(default=None, ge=1)


class SeasonRead(SeasonBase):
    """Serialized season representation."""

    id: uuid.UUID
    is_active: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

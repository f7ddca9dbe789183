"""Seasonal rate table configuration."""

from __future__ import annotations

import datetime
import uuid

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from huntbook.db.base import Base
from huntbook.models.mixins import TimestampMixin


class SeasonRateTable(TimestampMixin, Base):
    """Pricing and capacity parameters for a hunting season."""

    __tablename__ = "season_rate_tables"
    __table_args__ = (
        CheckConstraint("season_start <= season_end", name="season_bounds"),
        CheckConstraint(
            "weekday_rate >= 0 AND weekend_single_day >= 0"
            " AND weekend_two_consecutive_days >= 0"
            " AND weekend_three_day_combo >= 0 AND add_on_rate_per_day >= 0",
            name="non_negative_rates",
        ),
        CheckConstraint(
            "off_season_rate IS NULL OR off_season_rate >= 0",
            name="non_negative_off_season_rate",
        ),
        CheckConstraint("max_capacity_per_day >= 1", name="positive_capacity"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    season_start: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    season_end: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    weekday_rate: Mapped[int] = mapped_column(Integer, nullable=False)
    off_season_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weekend_single_day: Mapped[int] = mapped_column(Integer, nullable=False)
    weekend_two_consecutive_days: Mapped[int] = mapped_column(Integer, nullable=False)
    weekend_three_day_combo: Mapped[int] = mapped_column(Integer, nullable=False)
    add_on_rate_per_day: Mapped[int] = mapped_column(Integer, nullable=False)
    max_capacity_per_day: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

"""Per-day hunter capacity counters."""

from __future__ import annotations

import datetime

from sqlalchemy import Boolean, CheckConstraint, Date, Integer
from sqlalchemy.orm import Mapped, mapped_column

from huntbook.db.base import Base
from huntbook.models.mixins import TimestampMixin


class AvailabilityDay(TimestampMixin, Base):
    """Hunters booked and add-on state for one calendar day.

    Rows are created lazily by the reservation coordinator; a missing row
    means nothing is booked. ``version_id`` is bumped on every update so a
    writer holding a stale read fails its flush instead of overwriting.
    """

    __tablename__ = "availability_days"
    __table_args__ = (
        CheckConstraint("hunters_booked >= 0", name="hunters_booked_non_negative"),
    )

    day: Mapped[datetime.date] = mapped_column(Date, primary_key=True)
    hunters_booked: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    add_on_booked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

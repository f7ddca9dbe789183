"""Read access to per-day capacity counters."""

from __future__ import annotations

import datetime
from collections.abc import Iterator
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from huntbook.core.config import get_settings
from huntbook.models.availability import AvailabilityDay
from huntbook.services.pricing_service import BookingValidationError, RateTable


@dataclass(frozen=True, slots=True)
class AvailabilityRecord:
    """Capacity state of one day; days without a stored row are empty."""

    day: datetime.date
    hunters_booked: int = 0
    add_on_booked: bool = False


@dataclass(frozen=True, slots=True)
class DayCapacity:
    """Calendar view of one day for a given party size."""

    day: datetime.date
    hunters_booked: int
    add_on_booked: bool
    capacity: int | None
    remaining: int | None
    in_season: bool | None
    add_on_available: bool
    blocked: bool


def _to_record(row: AvailabilityDay) -> AvailabilityRecord:
    return AvailabilityRecord(
        day=row.day, hunters_booked=row.hunters_booked, add_on_booked=row.add_on_booked
    )


def _each_day(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    current = start
    while current <= end:
        yield current
        current += datetime.timedelta(days=1)


async def get_day(session: AsyncSession, day: datetime.date) -> AvailabilityRecord | None:
    """Return the stored record for ``day`` or ``None`` when nothing is booked."""
    row = await session.get(AvailabilityDay, day, populate_existing=True)
    if row is None:
        return None
    return _to_record(row)


async def get_range(
    session: AsyncSession,
    start: datetime.date,
    end: datetime.date,
) -> list[AvailabilityRecord]:
    """Return one record per day in ``[start, end]``, filling gaps with empty days."""
    if start > end:
        raise BookingValidationError("start must be before or equal to end")
    settings = get_settings()
    if (end - start).days + 1 > settings.availability_max_range_days:
        raise BookingValidationError(
            f"Date range may span at most {settings.availability_max_range_days} days"
        )

    result = await session.execute(
        select(AvailabilityDay)
        .where(AvailabilityDay.day >= start, AvailabilityDay.day <= end)
        .order_by(AvailabilityDay.day)
        .execution_options(populate_existing=True)
    )
    stored = {row.day: _to_record(row) for row in result.scalars()}
    return [stored.get(day) or AvailabilityRecord(day=day) for day in _each_day(start, end)]


def ranch_today() -> datetime.date:
    """Return the current calendar date at the ranch."""
    settings = get_settings()
    try:
        tz = ZoneInfo(settings.ranch_timezone)
    except ZoneInfoNotFoundError:  # pragma: no cover - depends on system tz database
        tz = ZoneInfo("UTC")
    return datetime.datetime.now(tz).date()


def first_selectable_day(
    rate_table: RateTable | None, today: datetime.date | None = None
) -> datetime.date:
    """Bookings open today, or at season start when the season has not begun."""
    today = today or ranch_today()
    if rate_table is None:
        return today
    return max(today, rate_table.season_start)


def is_day_blocked(
    record: AvailabilityRecord,
    *,
    party_size: int,
    rate_table: RateTable | None,
    today: datetime.date | None = None,
) -> bool:
    """Return True when a party of ``party_size`` cannot pick ``record.day``."""
    if record.day < first_selectable_day(rate_table, today):
        return True
    if rate_table is None:
        return False
    return record.hunters_booked + party_size > rate_table.max_capacity_per_day


async def get_capacity_view(
    session: AsyncSession,
    start: datetime.date,
    end: datetime.date,
    *,
    party_size: int = 1,
    rate_table: RateTable | None,
    today: datetime.date | None = None,
) -> list[DayCapacity]:
    """Join stored counters with the active rate table for calendar rendering."""
    if party_size < 1:
        raise BookingValidationError("Party size must be at least 1")
    records = await get_range(session, start, end)
    today = today or ranch_today()
    view: list[DayCapacity] = []
    for record in records:
        capacity = rate_table.max_capacity_per_day if rate_table else None
        view.append(
            DayCapacity(
                day=record.day,
                hunters_booked=record.hunters_booked,
                add_on_booked=record.add_on_booked,
                capacity=capacity,
                remaining=(
                    max(capacity - record.hunters_booked, 0) if capacity is not None else None
                ),
                in_season=rate_table.in_season(record.day) if rate_table else None,
                add_on_available=not record.add_on_booked,
                blocked=is_day_blocked(
                    record, party_size=party_size, rate_table=rate_table, today=today
                ),
            )
        )
    return view

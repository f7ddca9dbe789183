"""Season rate table configuration services."""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from huntbook.models.season import SeasonRateTable
from huntbook.services.pricing_service import RateTable, SeasonConfigurationError

logger = logging.getLogger(__name__)

_RATE_FIELDS = (
    "season_start",
    "season_end",
    "weekday_rate",
    "off_season_rate",
    "weekend_single_day",
    "weekend_two_consecutive_days",
    "weekend_three_day_combo",
    "add_on_rate_per_day",
    "max_capacity_per_day",
)


class NoActiveSeasonError(LookupError):
    """Raised when bookings are attempted without an active rate table."""

    reason = "no_active_season"

    def __init__(self, message: str = "No active season is configured") -> None:
        super().__init__(message)


def rate_table_from_season(season: SeasonRateTable) -> RateTable:
    """Build the immutable pricing view of a stored season."""
    return RateTable(**{name: getattr(season, name) for name in _RATE_FIELDS})


async def get_active_season(session: AsyncSession) -> SeasonRateTable | None:
    result = await session.execute(
        select(SeasonRateTable)
        .where(SeasonRateTable.is_active.is_(True))
        .order_by(SeasonRateTable.updated_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_active_rate_table(session: AsyncSession) -> RateTable:
    """Return the active rate table or fail fast when none is configured."""
    season = await get_active_season(session)
    if season is None:
        logger.warning("Booking attempted with no active season configured")
        raise NoActiveSeasonError()
    return rate_table_from_season(season)


async def list_seasons(session: AsyncSession) -> Sequence[SeasonRateTable]:
    result = await session.execute(
        select(SeasonRateTable).order_by(SeasonRateTable.season_start.desc())
    )
    return result.scalars().all()


async def get_season(
    session: AsyncSession, season_id: uuid.UUID
) -> SeasonRateTable | None:
    return await session.get(SeasonRateTable, season_id)


async def create_season(
    session: AsyncSession,
    *,
    name: str,
    activate: bool = False,
    **rates: Any,
) -> SeasonRateTable:
    """Store a new rate table, optionally making it the active one."""
    RateTable(**_rate_kwargs(rates))
    season = SeasonRateTable(name=name, is_active=False, **_rate_kwargs(rates))
    session.add(season)
    await session.flush()
    if activate:
        await _deactivate_others(session, season.id)
        season.is_active = True
    await session.commit()
    await session.refresh(season)
    logger.info("Created season %s (%s)", season.id, season.name)
    return season


async def update_season(
    session: AsyncSession,
    *,
    season: SeasonRateTable,
    **changes: Any,
) -> SeasonRateTable:
    """Apply changes to a stored rate table.

    Orders already committed keep the snapshot they were priced under, so
    edits only affect future quotes and reservations.
    """
    name = changes.pop("name", None)
    merged = {field: getattr(season, field) for field in _RATE_FIELDS}
    merged.update(_rate_kwargs(changes, partial=True))
    RateTable(**merged)
    for field, value in merged.items():
        setattr(season, field, value)
    if name is not None:
        season.name = name
    await session.commit()
    await session.refresh(season)
    logger.info("Updated season %s", season.id)
    return season


async def activate_season(
    session: AsyncSession, *, season: SeasonRateTable
) -> SeasonRateTable:
    """Make ``season`` the only active rate table."""
    await _deactivate_others(session, season.id)
    season.is_active = True
    await session.commit()
    await session.refresh(season)
    logger.info("Activated season %s (%s)", season.id, season.name)
    return season


async def _deactivate_others(session: AsyncSession, season_id: uuid.UUID) -> None:
    await session.execute(
        update(SeasonRateTable)
        .where(SeasonRateTable.id != season_id, SeasonRateTable.is_active.is_(True))
        .values(is_active=False)
    )


def _rate_kwargs(values: Mapping[str, Any], *, partial: bool = False) -> dict[str, Any]:
    unknown = set(values) - set(_RATE_FIELDS)
    if unknown:
        raise SeasonConfigurationError(
            "Unknown rate table fields: " + ", ".join(sorted(unknown))
        )
    if partial:
        return dict(values)
    kwargs = {field: values.get(field) for field in _RATE_FIELDS}
    missing = [
        field for field, value in kwargs.items() if value is None and field != "off_season_rate"
    ]
    if missing:
        raise SeasonConfigurationError("Missing rate table fields: " + ", ".join(missing))
    return kwargs


def normalize_season_document(document: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a season configuration document into rate table fields.

    Two document shapes are accepted. The current one carries
    ``weekendRates`` and ``weekdayRate``; the legacy one carries
    ``seasonRates`` (with older key aliases) and ``offSeasonRate``. Season
    bounds may be wrapped in stray double quotes.
    """
    start = _clean_date(document.get("seasonStart"), "seasonStart")
    end = _clean_date(document.get("seasonEnd"), "seasonEnd")
    has_current_schema = bool(document.get("weekendRates")) and (
        document.get("weekdayRate") is not None
    )

    if has_current_schema:
        weekend = document["weekendRates"]
        single = weekend.get("singleDay")
        two_day = _first_present(weekend, "twoConsecutiveDays", "twoDayCombo")
        three_day = weekend.get("threeDayCombo")
        weekday = document["weekdayRate"]
        off_season = document.get("offSeasonRate")
    else:
        legacy = document.get("seasonRates") or {}
        single = _first_present(legacy, "singleDay", "weekendSingleDay", default=0)
        two_day = _first_present(legacy, "twoConsecutiveDays", "twoDayCombo", default=0)
        three_day = _first_present(
            legacy, "threeDayCombo", "weekendThreeDayCombo", default=0
        )
        weekday = _first_present(document, "offSeasonRate", "weekdayRate", default=0)
        off_season = None

    return {
        "season_start": start,
        "season_end": end,
        "weekday_rate": _whole(weekday, "weekdayRate"),
        "off_season_rate": None if off_season is None else _whole(off_season, "offSeasonRate"),
        "weekend_single_day": _whole(single, "singleDay"),
        "weekend_two_consecutive_days": _whole(two_day, "twoConsecutiveDays"),
        "weekend_three_day_combo": _whole(three_day, "threeDayCombo"),
        "add_on_rate_per_day": _whole(document.get("partyDeckRatePerDay"), "partyDeckRatePerDay"),
        "max_capacity_per_day": _whole(document.get("maxHuntersPerDay"), "maxHuntersPerDay"),
    }


def _first_present(values: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if values.get(key) is not None:
            return values[key]
    return default


def _clean_date(raw: Any, label: str) -> datetime.date:
    if isinstance(raw, datetime.date):
        return raw
    text = str(raw or "").replace('"', "").strip()
    try:
        return datetime.date.fromisoformat(text)
    except ValueError as exc:
        raise SeasonConfigurationError(f"{label} must be a YYYY-MM-DD date") from exc


def _whole(value: Any, label: str) -> int:
    if value is None:
        raise SeasonConfigurationError(f"{label} is required")
    if isinstance(value, bool):
        raise SeasonConfigurationError(f"{label} must be a whole amount")
    if isinstance(value, float):
        if not value.is_integer():
            raise SeasonConfigurationError(f"{label} must be a whole amount")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SeasonConfigurationError(f"{label} must be a whole amount") from exc

"""Pricing engine for hunt bookings.

Everything in this module is pure: the same booking and rate table always
produce the same quote, so the live quote shown while a customer edits a
selection and the price committed at checkout cannot drift apart.
"""

from __future__ import annotations

import datetime
import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

FRIDAY, SATURDAY, SUNDAY = 4, 5, 6
WEEKEND_DAYS = frozenset({FRIDAY, SATURDAY, SUNDAY})
_ONE_DAY = datetime.timedelta(days=1)


class BookingValidationError(ValueError):
    """Raised when a booking request is malformed."""


class SeasonConfigurationError(ValueError):
    """Raised when a rate table violates its invariants."""


@dataclass(frozen=True, slots=True)
class RateTable:
    """Immutable pricing and capacity parameters for one season.

    ``off_season_rate`` is optional; when unset, off-season days bill at
    ``weekday_rate``.
    """

    season_start: datetime.date
    season_end: datetime.date
    weekday_rate: int
    weekend_single_day: int
    weekend_two_consecutive_days: int
    weekend_three_day_combo: int
    add_on_rate_per_day: int
    max_capacity_per_day: int
    off_season_rate: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.season_start, datetime.date) or not isinstance(
            self.season_end, datetime.date
        ):
            raise SeasonConfigurationError("Season bounds must be calendar dates")
        if self.season_start > self.season_end:
            raise SeasonConfigurationError("season_start must not be after season_end")
        rates = {
            "weekday_rate": self.weekday_rate,
            "weekend_single_day": self.weekend_single_day,
            "weekend_two_consecutive_days": self.weekend_two_consecutive_days,
            "weekend_three_day_combo": self.weekend_three_day_combo,
            "add_on_rate_per_day": self.add_on_rate_per_day,
        }
        if self.off_season_rate is not None:
            rates["off_season_rate"] = self.off_season_rate
        for name, value in rates.items():
            if not isinstance(value, int) or isinstance(value, bool):
                raise SeasonConfigurationError(f"{name} must be a whole amount")
            if value < 0:
                raise SeasonConfigurationError(f"{name} must not be negative")
        if (
            not isinstance(self.max_capacity_per_day, int)
            or isinstance(self.max_capacity_per_day, bool)
            or self.max_capacity_per_day < 1
        ):
            raise SeasonConfigurationError("max_capacity_per_day must be at least 1")

    def in_season(self, day: datetime.date) -> bool:
        return self.season_start <= day <= self.season_end

    @property
    def effective_off_season_rate(self) -> int:
        if self.off_season_rate is None:
            return self.weekday_rate
        return self.off_season_rate

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize to plain types for storage alongside an order."""
        return {
            "season_start": self.season_start.isoformat(),
            "season_end": self.season_end.isoformat(),
            "weekday_rate": self.weekday_rate,
            "off_season_rate": self.off_season_rate,
            "weekend_rates": {
                "single_day": self.weekend_single_day,
                "two_consecutive_days": self.weekend_two_consecutive_days,
                "three_day_combo": self.weekend_three_day_combo,
            },
            "add_on_rate_per_day": self.add_on_rate_per_day,
            "max_capacity_per_day": self.max_capacity_per_day,
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> RateTable:
        weekend = snapshot["weekend_rates"]
        return cls(
            season_start=datetime.date.fromisoformat(snapshot["season_start"]),
            season_end=datetime.date.fromisoformat(snapshot["season_end"]),
            weekday_rate=snapshot["weekday_rate"],
            off_season_rate=snapshot.get("off_season_rate"),
            weekend_single_day=weekend["single_day"],
            weekend_two_consecutive_days=weekend["two_consecutive_days"],
            weekend_three_day_combo=weekend["three_day_combo"],
            add_on_rate_per_day=snapshot["add_on_rate_per_day"],
            max_capacity_per_day=snapshot["max_capacity_per_day"],
        )


@dataclass(frozen=True, slots=True)
class BookingRequest:
    """Validated booking selection. Use :func:`build_booking_request`."""

    dates: tuple[datetime.date, ...]
    party_size: int
    add_on_dates: tuple[datetime.date, ...] = ()


def build_booking_request(
    dates: Iterable[datetime.date],
    party_size: int,
    add_on_dates: Iterable[datetime.date] = (),
) -> BookingRequest:
    """Validate raw selections and return a normalized booking request."""

    date_list = list(dates)
    add_on_list = list(add_on_dates)
    if not date_list:
        raise BookingValidationError("At least one date must be selected")
    if isinstance(party_size, bool) or not isinstance(party_size, int) or party_size < 1:
        raise BookingValidationError("Party size must be at least 1")
    duplicates = _duplicates(date_list)
    if duplicates:
        raise BookingValidationError(
            "Duplicate dates selected: " + ", ".join(d.isoformat() for d in duplicates)
        )
    add_on_duplicates = _duplicates(add_on_list)
    if add_on_duplicates:
        raise BookingValidationError(
            "Add-on requested more than once for: "
            + ", ".join(d.isoformat() for d in add_on_duplicates)
        )
    selected = set(date_list)
    stray = sorted(d for d in add_on_list if d not in selected)
    if stray:
        raise BookingValidationError(
            "Add-on dates must be among the selected dates: "
            + ", ".join(d.isoformat() for d in stray)
        )
    return BookingRequest(
        dates=tuple(sorted(date_list)),
        party_size=party_size,
        add_on_dates=tuple(sorted(add_on_list)),
    )


def _duplicates(values: list[datetime.date]) -> list[datetime.date]:
    seen: set[datetime.date] = set()
    repeated: set[datetime.date] = set()
    for value in values:
        if value in seen:
            repeated.add(value)
        seen.add(value)
    return sorted(repeated)


class LineKind(str, enum.Enum):
    """Billing unit applied to one or more consecutive dates."""

    OFF_SEASON = "off_season"
    WEEKDAY = "weekday"
    WEEKEND_SINGLE = "weekend_single"
    WEEKEND_TWO_DAY = "weekend_two_day"
    WEEKEND_THREE_DAY = "weekend_three_day"


_DESCRIPTIONS = {
    LineKind.OFF_SEASON: "Off-season day",
    LineKind.WEEKDAY: "Weekday",
    LineKind.WEEKEND_SINGLE: "Weekend day",
    LineKind.WEEKEND_TWO_DAY: "Two-day weekend combo",
    LineKind.WEEKEND_THREE_DAY: "Three-day weekend combo",
}


@dataclass(slots=True)
class PricingLine:
    """Per-person charge for a group of dates."""

    kind: LineKind
    dates: tuple[datetime.date, ...]
    amount_per_person: int

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.kind]


@dataclass(slots=True)
class PricingQuote:
    """Itemized price for a booking request."""

    items: list[PricingLine]
    party_size: int
    per_person_total: int
    hunting_total: int
    add_on_days: int
    add_on_rate_per_day: int
    add_on_total: int
    total: int
    dates: tuple[datetime.date, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        """Serialize the quote to plain types for responses and storage."""

        return {
            "items": [
                {
                    "kind": line.kind.value,
                    "description": line.description,
                    "dates": [d.isoformat() for d in line.dates],
                    "amount_per_person": line.amount_per_person,
                }
                for line in self.items
            ],
            "dates": [d.isoformat() for d in self.dates],
            "party_size": self.party_size,
            "per_person_total": self.per_person_total,
            "hunting_total": self.hunting_total,
            "add_on_days": self.add_on_days,
            "add_on_rate_per_day": self.add_on_rate_per_day,
            "add_on_total": self.add_on_total,
            "total": self.total,
        }


def price_booking(request: BookingRequest, rate_table: RateTable) -> PricingQuote:
    """Price a booking request against a rate table.

    Dates are walked in calendar order. In-season Friday/Saturday/Sunday runs
    are bundled greedily from the earliest unconsumed date: a Fri-Sat-Sun run
    bills the three-day combo, a Fri-Sat or Sat-Sun pair the two-day combo,
    and anything else the single weekend rate. Off-season days never bundle.
    """

    days = sorted(request.dates)
    items: list[PricingLine] = []
    i = 0
    while i < len(days):
        current = days[i]
        if not rate_table.in_season(current):
            items.append(
                PricingLine(
                    LineKind.OFF_SEASON, (current,), rate_table.effective_off_season_rate
                )
            )
            i += 1
            continue

        weekday = current.weekday()
        if weekday not in WEEKEND_DAYS:
            items.append(PricingLine(LineKind.WEEKDAY, (current,), rate_table.weekday_rate))
            i += 1
            continue

        if weekday == FRIDAY and _follows(days, i, 2, rate_table):
            items.append(
                PricingLine(
                    LineKind.WEEKEND_THREE_DAY,
                    tuple(days[i : i + 3]),
                    rate_table.weekend_three_day_combo,
                )
            )
            i += 3
        elif weekday in (FRIDAY, SATURDAY) and _follows(days, i, 1, rate_table):
            items.append(
                PricingLine(
                    LineKind.WEEKEND_TWO_DAY,
                    tuple(days[i : i + 2]),
                    rate_table.weekend_two_consecutive_days,
                )
            )
            i += 2
        else:
            items.append(
                PricingLine(LineKind.WEEKEND_SINGLE, (current,), rate_table.weekend_single_day)
            )
            i += 1

    per_person_total = sum(line.amount_per_person for line in items)
    hunting_total = per_person_total * request.party_size
    add_on_days = len(request.add_on_dates)
    add_on_total = rate_table.add_on_rate_per_day * add_on_days
    return PricingQuote(
        items=items,
        party_size=request.party_size,
        per_person_total=per_person_total,
        hunting_total=hunting_total,
        add_on_days=add_on_days,
        add_on_rate_per_day=rate_table.add_on_rate_per_day,
        add_on_total=add_on_total,
        total=hunting_total + add_on_total,
        dates=tuple(days),
    )


def quote(request: BookingRequest, rate_table: RateTable) -> int:
    """Return only the total price for a booking request."""
    return price_booking(request, rate_table).total


def _follows(
    days: list[datetime.date], index: int, count: int, rate_table: RateTable
) -> bool:
    # True when the next ``count`` sorted dates are the consecutive in-season
    # days directly after ``days[index]``.
    if index + count >= len(days):
        return False
    start = days[index]
    for offset in range(1, count + 1):
        candidate = days[index + offset]
        if candidate != start + _ONE_DAY * offset or not rate_table.in_season(candidate):
            return False
    return True

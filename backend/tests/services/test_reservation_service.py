"""Tests for capacity-checked reservations and the order lifecycle."""

from __future__ import annotations

import asyncio
import datetime
import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.orm.exc import StaleDataError

from huntbook.db.session import get_sessionmaker
from huntbook.models import AvailabilityDay, Order, OrderStatus
from huntbook.services import reservation_service, season_service
from huntbook.services.pricing_service import RateTable, build_booking_request, quote
from huntbook.services.reservation_service import (
    AddOnUnavailableError,
    CapacityExceededError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
    RejectionReason,
    ReservationContentionError,
)

pytestmark = pytest.mark.asyncio

ONE_DAY = datetime.timedelta(days=1)
FRIDAY = datetime.date(2030, 10, 25)
SATURDAY = FRIDAY + ONE_DAY
SUNDAY = FRIDAY + 2 * ONE_DAY


async def _counters(db_url: str) -> dict[datetime.date, tuple[int, bool]]:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        rows = (await session.execute(select(AvailabilityDay))).scalars()
        return {row.day: (row.hunters_booked, row.add_on_booked) for row in rows}


async def _reserve(db_url: str, rate_table: RateTable, dates, party_size, add_on_dates=()):
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        return await reservation_service.reserve(
            session,
            request=build_booking_request(dates, party_size, add_on_dates),
            rate_table=rate_table,
            customer_id="cust-1",
            customer={"email": "hunter@example.com"},
        )


async def test_reserve_creates_pending_order_and_counters(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    order = await _reserve(db_url, rate_table, [FRIDAY, SATURDAY, SUNDAY], 2, [SATURDAY])

    assert order.status is OrderStatus.PENDING
    assert order.computed_price == 450 * 2 + 500
    assert order.dates == [FRIDAY.isoformat(), SATURDAY.isoformat(), SUNDAY.isoformat()]
    assert order.add_on_dates == [SATURDAY.isoformat()]
    assert order.price_breakdown["items"][0]["kind"] == "weekend_three_day"
    assert order.rate_table_snapshot["weekend_rates"]["three_day_combo"] == 450
    assert order.customer == {"email": "hunter@example.com"}

    assert await _counters(db_url) == {
        FRIDAY: (2, False),
        SATURDAY: (2, True),
        SUNDAY: (2, False),
    }


async def test_capacity_is_enforced_per_day(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    await _reserve(db_url, rate_table, [SATURDAY], 100)

    with pytest.raises(CapacityExceededError) as excinfo:
        await _reserve(db_url, rate_table, [SATURDAY], 1)

    assert excinfo.value.reason is RejectionReason.CAPACITY_EXCEEDED
    assert excinfo.value.dates == (SATURDAY,)
    assert excinfo.value.to_dict()["dates"] == [SATURDAY.isoformat()]


async def test_rejection_leaves_no_partial_increments(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    await _reserve(db_url, rate_table, [SUNDAY], 90)

    with pytest.raises(CapacityExceededError) as excinfo:
        await _reserve(db_url, rate_table, [FRIDAY, SATURDAY, SUNDAY], 20, [FRIDAY])

    assert excinfo.value.dates == (SUNDAY,)
    assert await _counters(db_url) == {SUNDAY: (90, False)}
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        orders = await reservation_service.list_orders(session)
    assert len(orders) == 1


async def test_add_on_is_exclusive_per_day(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    await _reserve(db_url, rate_table, [SATURDAY], 1, [SATURDAY])

    with pytest.raises(AddOnUnavailableError) as excinfo:
        await _reserve(db_url, rate_table, [SATURDAY, SUNDAY], 1, [SATURDAY, SUNDAY])
    assert excinfo.value.dates == (SATURDAY,)

    # Hunting capacity on the same day is still available without the add-on.
    await _reserve(db_url, rate_table, [SATURDAY], 1)
    assert await _counters(db_url) == {SATURDAY: (2, True)}


async def test_concurrent_reservations_never_oversell(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    results = await asyncio.gather(
        _reserve(db_url, rate_table, [SATURDAY], 60),
        _reserve(db_url, rate_table, [SATURDAY], 60),
        return_exceptions=True,
    )

    orders = [result for result in results if isinstance(result, Order)]
    rejections = [result for result in results if isinstance(result, Exception)]
    assert len(orders) == 1
    assert len(rejections) == 1
    assert isinstance(rejections[0], CapacityExceededError)
    assert await _counters(db_url) == {SATURDAY: (60, False)}


async def test_concurrent_add_on_requests_have_one_winner(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    await _reserve(db_url, rate_table, [SUNDAY], 1)
    results = await asyncio.gather(
        *(_reserve(db_url, rate_table, [SUNDAY], 1, [SUNDAY]) for _ in range(3)),
        return_exceptions=True,
    )

    winners = [result for result in results if isinstance(result, Order)]
    assert len(winners) == 1
    assert all(
        isinstance(result, AddOnUnavailableError)
        for result in results
        if not isinstance(result, Order)
    )
    assert await _counters(db_url) == {SUNDAY: (2, True)}


async def test_persistent_conflicts_surface_as_contention(
    reset_database, db_url: str, rate_table: RateTable, monkeypatch: pytest.MonkeyPatch
) -> None:
    attempts: list[int] = []
    delays: list[float] = []

    async def _always_stale(session, **kwargs):
        attempts.append(1)
        raise StaleDataError("availability_days row changed underneath us")

    async def _record_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr(reservation_service, "_reserve_once", _always_stale)
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        with pytest.raises(ReservationContentionError) as excinfo:
            await reservation_service.reserve(
                session,
                request=build_booking_request([SATURDAY], 2),
                rate_table=rate_table,
                max_attempts=3,
                sleep=_record_sleep,
            )

    assert excinfo.value.retryable is True
    assert excinfo.value.reason is RejectionReason.CONTENTION
    assert len(attempts) == 3
    assert len(delays) == 2
    assert delays[0] <= delays[1] * 2


async def test_transient_conflict_is_retried(
    reset_database, db_url: str, rate_table: RateTable, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_reserve_once = reservation_service._reserve_once
    calls: list[int] = []

    async def _flaky(session, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise StaleDataError("first attempt loses the race")
        return await real_reserve_once(session, **kwargs)

    async def _no_sleep(delay: float) -> None:
        return None

    monkeypatch.setattr(reservation_service, "_reserve_once", _flaky)
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        order = await reservation_service.reserve(
            session,
            request=build_booking_request([SATURDAY], 2),
            rate_table=rate_table,
            sleep=_no_sleep,
        )

    assert order.party_size == 2
    assert len(calls) == 2
    assert await _counters(db_url) == {SATURDAY: (2, False)}


async def test_order_keeps_price_after_rate_change(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        season = await season_service.create_season(
            session, name="Fall 2030", activate=True, **_season_fields(rate_table)
        )
        active = await season_service.get_active_rate_table(session)
        order = await reservation_service.reserve(
            session, request=build_booking_request([SATURDAY], 1), rate_table=active
        )
        await season_service.update_season(
            session, season=season, weekend_single_day=260, max_capacity_per_day=50
        )
        repriced = await season_service.get_active_rate_table(session)
        new_quote = quote(build_booking_request([SATURDAY], 1), repriced)

    async with sessionmaker() as session:
        stored = await reservation_service.get_order(session, order.id)

    assert new_quote == 260
    assert stored is not None
    assert stored.computed_price == 200
    assert stored.price_breakdown["items"][0]["amount_per_person"] == 200
    assert stored.rate_table_snapshot["weekend_rates"]["single_day"] == 200
    assert stored.rate_table_snapshot["max_capacity_per_day"] == 100
    assert RateTable.from_snapshot(stored.rate_table_snapshot) == rate_table


async def test_non_string_contact_email_still_returns_order(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        order = await reservation_service.reserve(
            session,
            request=build_booking_request([SATURDAY], 2),
            rate_table=rate_table,
            customer={"email": 12345},
        )

    assert order.status is OrderStatus.PENDING
    assert order.customer == {"email": 12345}
    assert await _counters(db_url) == {SATURDAY: (2, False)}
    async with sessionmaker() as session:
        orders = await reservation_service.list_orders(session)
    assert [stored.id for stored in orders] == [order.id]


async def test_overlapping_multi_day_reservations_stay_within_capacity(
    reset_database, db_url: str, rate_table: RateTable
) -> None:
    requests = [([FRIDAY, SATURDAY], 60), ([SATURDAY, SUNDAY], 60), ([SUNDAY], 45)]
    results = await asyncio.gather(
        *(_reserve(db_url, rate_table, dates, party) for dates, party in requests),
        return_exceptions=True,
    )

    assert not any(
        isinstance(result, Exception) and not isinstance(result, CapacityExceededError)
        for result in results
    )
    expected: dict[datetime.date, int] = {}
    for (dates, party), result in zip(requests, results):
        if isinstance(result, Order):
            for day in dates:
                expected[day] = expected.get(day, 0) + party
    # A rejected request leaves no increment on any of its days, conflicting or not.
    counters = await _counters(db_url)
    assert {day: booked for day, (booked, _) in counters.items() if booked} == expected
    assert all(booked <= rate_table.max_capacity_per_day for booked, _ in counters.values())
    # The two 60-hunter requests share Saturday, so at most one of them wins.
    assert not (isinstance(results[0], Order) and isinstance(results[1], Order))
    assert any(isinstance(result, Order) for result in results)


async def test_status_transitions(reset_database, db_url: str, rate_table: RateTable) -> None:
    paid = await _reserve(db_url, rate_table, [FRIDAY], 1)
    cancelled = await _reserve(db_url, rate_table, [FRIDAY], 1)

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        order = await reservation_service.mark_paid(
            session, order_id=paid.id, payment_reference="ch_123"
        )
        assert order.status is OrderStatus.PAID
        assert order.paid_at is not None
        assert order.payment_reference == "ch_123"

        again = await reservation_service.mark_paid(session, order_id=paid.id)
        assert again.status is OrderStatus.PAID
        assert again.payment_reference == "ch_123"

        order = await reservation_service.mark_cancelled(session, order_id=cancelled.id)
        assert order.status is OrderStatus.CANCELLED
        assert order.cancelled_at is not None

        with pytest.raises(InvalidStatusTransitionError):
            await reservation_service.mark_paid(session, order_id=cancelled.id)

        with pytest.raises(OrderNotFoundError):
            await reservation_service.mark_cancelled(session, order_id=uuid.uuid4())

        refunded = await reservation_service.mark_cancelled(session, order_id=paid.id)
        assert refunded.status is OrderStatus.CANCELLED

    # Cancelling does not hand capacity back.
    assert await _counters(db_url) == {FRIDAY: (2, False)}


async def test_list_orders_filters(reset_database, db_url: str, rate_table: RateTable) -> None:
    first = await _reserve(db_url, rate_table, [FRIDAY], 1)
    await _reserve(db_url, rate_table, [SATURDAY], 1)

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await reservation_service.mark_paid(session, order_id=first.id)
        paid = await reservation_service.list_orders(session, status=OrderStatus.PAID)
        by_customer = await reservation_service.list_orders(session, customer_id="cust-1")
        nobody = await reservation_service.list_orders(session, customer_id="cust-2")

    assert [order.id for order in paid] == [first.id]
    assert len(by_customer) == 2
    assert nobody == []


def _season_fields(table: RateTable) -> dict[str, object]:
    return {
        "season_start": table.season_start,
        "season_end": table.season_end,
        "weekday_rate": table.weekday_rate,
        "off_season_rate": table.off_season_rate,
        "weekend_single_day": table.weekend_single_day,
        "weekend_two_consecutive_days": table.weekend_two_consecutive_days,
        "weekend_three_day_combo": table.weekend_three_day_combo,
        "add_on_rate_per_day": table.add_on_rate_per_day,
        "max_capacity_per_day": table.max_capacity_per_day,
    }

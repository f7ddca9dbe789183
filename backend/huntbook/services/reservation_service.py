"""Capacity-checked reservation of hunt days and order lifecycle."""

from __future__ import annotations

import asyncio
import datetime
import enum
import logging
import random
import uuid
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import UTC
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from huntbook.core.config import Settings, get_settings
from huntbook.models.availability import AvailabilityDay
from huntbook.models.order import Order, OrderStatus
from huntbook.security.redact import mask_email
from huntbook.services import pricing_service
from huntbook.services.pricing_service import BookingRequest, PricingQuote, RateTable

logger = logging.getLogger(__name__)

# Raised at flush/commit when another transaction touched the same days first:
# a stale version_id on update, a duplicate insert of a lazily created day, or
# a lock/serialization failure reported by the database.
_CONFLICT_ERRORS = (StaleDataError, IntegrityError, OperationalError)

_ALLOWED_STATUS_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),
}


class RejectionReason(str, enum.Enum):
    """Why a reservation was not committed."""

    CAPACITY_EXCEEDED = "capacity_exceeded"
    ADD_ON_UNAVAILABLE = "add_on_unavailable"
    CONTENTION = "contention"


class ReservationRejectedError(Exception):
    """Base class for reservations that were not committed."""

    reason: RejectionReason
    retryable = False

    def __init__(self, message: str, dates: Iterable[datetime.date] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.dates: tuple[datetime.date, ...] = tuple(sorted(dates))

    def to_dict(self) -> dict[str, Any]:
        return {
            "reason": self.reason.value,
            "message": self.message,
            "dates": [day.isoformat() for day in self.dates],
        }


class CapacityExceededError(ReservationRejectedError):
    reason = RejectionReason.CAPACITY_EXCEEDED


class AddOnUnavailableError(ReservationRejectedError):
    reason = RejectionReason.ADD_ON_UNAVAILABLE


class ReservationContentionError(ReservationRejectedError):
    """Concurrent writers kept winning; safe to retry from a fresh quote."""

    reason = RejectionReason.CONTENTION
    retryable = True


class OrderNotFoundError(LookupError):
    """Raised when an order id does not exist."""


class InvalidStatusTransitionError(ValueError):
    """Raised when the payment flow requests a forbidden status change."""


def _format_days(days: Iterable[datetime.date]) -> str:
    return ", ".join(day.isoformat() for day in days)


def _supports_row_locks(session: AsyncSession) -> bool:
    return session.get_bind().dialect.name == "postgresql"


def _backoff_delay(attempt: int, settings: Settings) -> float:
    ceiling = min(
        settings.reservation_retry_max_delay,
        settings.reservation_retry_base_delay * (2 ** (attempt - 1)),
    )
    return ceiling * (0.5 + random.random() / 2)


async def reserve(
    session: AsyncSession,
    *,
    request: BookingRequest,
    rate_table: RateTable,
    customer_id: str | None = None,
    customer: dict[str, Any] | None = None,
    max_attempts: int | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Order:
    """Reserve capacity for every requested day and record a pending order.

    The price is recomputed here from the request and rate table; a price
    quoted to the client earlier is never trusted. Either every day is
    incremented and the order is stored, or nothing is written.

    Raises:
        CapacityExceededError: a day cannot take ``request.party_size`` more hunters.
        AddOnUnavailableError: the add-on is already reserved on a requested day.
        ReservationContentionError: commit conflicts persisted past the retry budget.
    """
    settings = get_settings()
    attempts = max_attempts or settings.reservation_max_attempts
    quote = pricing_service.price_booking(request, rate_table)

    for attempt in range(1, attempts + 1):
        try:
            order = await _reserve_once(
                session,
                request=request,
                rate_table=rate_table,
                quote=quote,
                customer_id=customer_id,
                customer=customer or {},
            )
        except ReservationRejectedError as exc:
            await session.rollback()
            logger.info(
                "Reservation rejected (%s) for %s", exc.reason.value, _format_days(exc.dates)
            )
            raise
        except _CONFLICT_ERRORS as exc:
            await session.rollback()
            if attempt >= attempts:
                logger.warning(
                    "Reservation for %s abandoned after %d attempts: %s",
                    _format_days(request.dates),
                    attempts,
                    exc.__class__.__name__,
                )
                break
            delay = _backoff_delay(attempt, settings)
            logger.warning(
                "Reservation conflict on attempt %d/%d (%s); retrying in %.3fs",
                attempt,
                attempts,
                exc.__class__.__name__,
                delay,
            )
            await sleep(delay)
        else:
            await session.refresh(order)
            logger.info(
                "Reserved order %s: %d hunter(s) on %s for %d (customer %s)",
                order.id,
                order.party_size,
                _format_days(request.dates),
                order.computed_price,
                mask_email((customer or {}).get("email")) or customer_id or "anonymous",
            )
            return order

    raise ReservationContentionError(
        "The selected dates are in high demand; please try again",
        request.dates,
    )


async def _reserve_once(
    session: AsyncSession,
    *,
    request: BookingRequest,
    rate_table: RateTable,
    quote: PricingQuote,
    customer_id: str | None,
    customer: dict[str, Any],
) -> Order:
    days = sorted(request.dates)
    stmt = (
        select(AvailabilityDay)
        .where(AvailabilityDay.day.in_(days))
        .order_by(AvailabilityDay.day)
        .execution_options(populate_existing=True)
    )
    if _supports_row_locks(session):
        stmt = stmt.with_for_update()
    rows = {row.day: row for row in (await session.execute(stmt)).scalars()}

    over_capacity = [
        day
        for day in days
        if (rows[day].hunters_booked if day in rows else 0) + request.party_size
        > rate_table.max_capacity_per_day
    ]
    if over_capacity:
        raise CapacityExceededError(
            f"Not enough capacity for {request.party_size} hunter(s) on "
            f"{_format_days(over_capacity)}",
            over_capacity,
        )

    add_on_taken = [
        day for day in request.add_on_dates if day in rows and rows[day].add_on_booked
    ]
    if add_on_taken:
        raise AddOnUnavailableError(
            f"The party deck is already reserved on {_format_days(add_on_taken)}",
            add_on_taken,
        )

    for day in days:
        row = rows.get(day)
        if row is None:
            row = AvailabilityDay(day=day, hunters_booked=0, add_on_booked=False)
            session.add(row)
            rows[day] = row
        row.hunters_booked += request.party_size
    for day in request.add_on_dates:
        rows[day].add_on_booked = True

    order = Order(
        customer_id=customer_id,
        customer=customer,
        dates=[day.isoformat() for day in days],
        party_size=request.party_size,
        add_on_dates=[day.isoformat() for day in sorted(request.add_on_dates)],
        computed_price=quote.total,
        price_breakdown=quote.to_dict(),
        rate_table_snapshot=rate_table.to_snapshot(),
        status=OrderStatus.PENDING,
    )
    session.add(order)
    await session.commit()
    return order


async def get_order(session: AsyncSession, order_id: uuid.UUID) -> Order | None:
    return await session.get(Order, order_id, populate_existing=True)


async def list_orders(
    session: AsyncSession,
    *,
    customer_id: str | None = None,
    status: OrderStatus | None = None,
    skip: int = 0,
    limit: int = 50,
) -> Sequence[Order]:
    stmt = select(Order).order_by(Order.created_at.desc())
    if customer_id is not None:
        stmt = stmt.where(Order.customer_id == customer_id)
    if status is not None:
        stmt = stmt.where(Order.status == status)
    result = await session.execute(stmt.offset(skip).limit(limit))
    return result.scalars().all()


def _validate_status_transition(current: OrderStatus, target: OrderStatus) -> None:
    if target == current:
        return
    allowed = _ALLOWED_STATUS_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidStatusTransitionError(
            f"Invalid status transition from {current.value} to {target.value}"
        )


async def _transition(
    session: AsyncSession, order_id: uuid.UUID, target: OrderStatus
) -> Order:
    stmt = select(Order).where(Order.id == order_id).execution_options(
        populate_existing=True
    )
    if _supports_row_locks(session):
        stmt = stmt.with_for_update()
    order = (await session.execute(stmt)).scalar_one_or_none()
    if order is None:
        await session.rollback()
        raise OrderNotFoundError(f"Order {order_id} not found")
    try:
        _validate_status_transition(order.status, target)
    except InvalidStatusTransitionError:
        await session.rollback()
        raise
    return order


async def mark_paid(
    session: AsyncSession,
    *,
    order_id: uuid.UUID,
    payment_reference: str | None = None,
) -> Order:
    """Record that the payment flow captured funds for an order."""
    order = await _transition(session, order_id, OrderStatus.PAID)
    if order.status is OrderStatus.PAID:
        await session.commit()
        return order
    order.status = OrderStatus.PAID
    order.paid_at = datetime.datetime.now(UTC)
    if payment_reference:
        order.payment_reference = payment_reference
    await session.commit()
    await session.refresh(order)
    logger.info("Order %s marked paid", order.id)
    return order


async def mark_cancelled(session: AsyncSession, *, order_id: uuid.UUID) -> Order:
    """Record that the payment flow abandoned or voided an order.

    Reserved capacity is not released here; refunds and releases belong to
    the external cancellation flow.
    """
    order = await _transition(session, order_id, OrderStatus.CANCELLED)
    if order.status is OrderStatus.CANCELLED:
        await session.commit()
        return order
    order.status = OrderStatus.CANCELLED
    order.cancelled_at = datetime.datetime.now(UTC)
    await session.commit()
    await session.refresh(order)
    logger.info("Order %s marked cancelled", order.id)
    return order

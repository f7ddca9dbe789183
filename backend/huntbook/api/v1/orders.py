"""Checkout and order lifecycle API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from huntbook.api import deps
from huntbook.models.order import OrderStatus
from huntbook.schemas.order import OrderCreate, OrderRead, PaymentCallback
from huntbook.services import pricing_service, reservation_service, season_service

router = APIRouter()

RETRY_AFTER_SECONDS = "1"


def _rejection_exception(
    exc: reservation_service.ReservationRejectedError,
) -> HTTPException:
    if exc.retryable:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=exc.to_dict(),
            headers={"Retry-After": RETRY_AFTER_SECONDS},
        )
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.to_dict())


@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Reserve dates and create a pending order",
)
async def create_order(
    payload: OrderCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> OrderRead:
    try:
        request = pricing_service.build_booking_request(
            payload.dates, payload.party_size, payload.add_on_dates
        )
    except pricing_service.BookingValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    try:
        rate_table = await season_service.get_active_rate_table(session)
    except season_service.NoActiveSeasonError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"reason": exc.reason, "message": str(exc)},
        ) from exc
    try:
        order = await reservation_service.reserve(
            session,
            request=request,
            rate_table=rate_table,
            customer_id=payload.customer_id,
            customer=payload.customer,
        )
    except reservation_service.ReservationRejectedError as exc:
        raise _rejection_exception(exc) from exc
    return OrderRead.model_validate(order)


@router.get(
    "",
    response_model=list[OrderRead],
    summary="List orders",
    dependencies=[Depends(deps.require_admin)],
)
async def list_orders(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    customer_id: str | None = None,
    order_status: Annotated[OrderStatus | None, Query(alias="status")] = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1)] = 50,
) -> list[OrderRead]:
    orders = await reservation_service.list_orders(
        session,
        customer_id=customer_id,
        status=order_status,
        skip=skip,
        limit=min(limit, 100),
    )
    return [OrderRead.model_validate(order) for order in orders]


@router.get("/{order_id}", response_model=OrderRead, summary="Get order")
async def get_order(
    order_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> OrderRead:
    order = await reservation_service.get_order(session, order_id)
    if order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Order not found"
        )
    return OrderRead.model_validate(order)


@router.post(
    "/{order_id}/paid",
    response_model=OrderRead,
    summary="Payment callback: order paid",
    dependencies=[Depends(deps.verify_payment_signature)],
)
async def mark_order_paid(
    order_id: uuid.UUID,
    payload: PaymentCallback,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> OrderRead:
    try:
        order = await reservation_service.mark_paid(
            session, order_id=order_id, payment_reference=payload.payment_reference
        )
    except reservation_service.OrderNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except reservation_service.InvalidStatusTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    return OrderRead.model_validate(order)


@router.post(
    "/{order_id}/cancelled",
    response_model=OrderRead,
    summary="Payment callback: order cancelled",
    dependencies=[Depends(deps.verify_payment_signature)],
)
async def mark_order_cancelled(
    order_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> OrderRead:
    try:
        order = await reservation_service.mark_cancelled(session, order_id=order_id)
    except reservation_service.OrderNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except reservation_service.InvalidStatusTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    return OrderRead.model_validate(order)

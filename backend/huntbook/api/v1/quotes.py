"""Live price quotes for booking selections."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from huntbook.api import deps
from huntbook.core.config import get_settings
from huntbook.schemas.booking import BookingSelection, QuoteRead
from huntbook.services import pricing_service, season_service

router = APIRouter()

_QUOTE_RATE_DEP = deps.rate_limited(get_settings().rate_limit_quote)


@router.post(
    "/quotes",
    response_model=QuoteRead,
    summary="Quote a booking selection",
    dependencies=[_QUOTE_RATE_DEP],
)
async def create_quote(
    payload: BookingSelection,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> QuoteRead:
    """Price a selection against the active season.

    Quotes are advisory: capacity is only checked when an order is placed.
    """
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
    quote = pricing_service.price_booking(request, rate_table)
    return QuoteRead.model_validate(quote.to_dict())

"""Availability calendar API."""

from __future__ import annotations

import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from huntbook.api import deps
from huntbook.schemas.availability import AvailabilityResponse, DayAvailabilityRead
from huntbook.services import availability_service, season_service
from huntbook.services.pricing_service import BookingValidationError

router = APIRouter()


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    summary="Per-day capacity for a date range",
)
async def get_availability(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    start: datetime.date,
    end: datetime.date,
    party_size: Annotated[int, Query(ge=1)] = 1,
) -> AvailabilityResponse:
    season = await season_service.get_active_season(session)
    rate_table = season_service.rate_table_from_season(season) if season else None
    today = availability_service.ranch_today()
    try:
        days = await availability_service.get_capacity_view(
            session,
            start,
            end,
            party_size=party_size,
            rate_table=rate_table,
            today=today,
        )
    except BookingValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return AvailabilityResponse(
        start=start,
        end=end,
        party_size=party_size,
        season_active=rate_table is not None,
        first_selectable_day=availability_service.first_selectable_day(rate_table, today),
        days=[DayAvailabilityRead.model_validate(day) for day in days],
    )

"""Season rate table administration API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from huntbook.api import deps
from huntbook.models.season import SeasonRateTable
from huntbook.schemas.season import SeasonCreate, SeasonRead, SeasonUpdate
from huntbook.services import season_service
from huntbook.services.pricing_service import SeasonConfigurationError

router = APIRouter(dependencies=[Depends(deps.require_admin)])


async def _get_season_or_404(
    session: AsyncSession, season_id: uuid.UUID
) -> SeasonRateTable:
    season = await season_service.get_season(session, season_id)
    if season is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Season not found"
        )
    return season


@router.get("", response_model=list[SeasonRead], summary="List seasons")
async def list_seasons(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[SeasonRead]:
    seasons = await season_service.list_seasons(session)
    return [SeasonRead.model_validate(season) for season in seasons]


@router.post(
    "",
    response_model=SeasonRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create season",
)
async def create_season(
    payload: SeasonCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> SeasonRead:
    data = payload.model_dump()
    activate = data.pop("activate")
    name = data.pop("name")
    try:
        season = await season_service.create_season(
            session, name=name, activate=activate, **data
        )
    except SeasonConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return SeasonRead.model_validate(season)


@router.get("/active", response_model=SeasonRead, summary="Get active season")
async def get_active_season(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> SeasonRead:
    season = await season_service.get_active_season(session)
    if season is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No active season"
        )
    return SeasonRead.model_validate(season)


@router.patch("/{season_id}", response_model=SeasonRead, summary="Update season")
async def update_season(
    season_id: uuid.UUID,
    payload: SeasonUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> SeasonRead:
    season = await _get_season_or_404(session, season_id)
    try:
        season = await season_service.update_season(
            session, season=season, **payload.model_dump(exclude_unset=True)
        )
    except SeasonConfigurationError as exc:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return SeasonRead.model_validate(season)


@router.post(
    "/{season_id}/activate", response_model=SeasonRead, summary="Activate season"
)
async def activate_season(
    season_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> SeasonRead:
    season = await _get_season_or_404(session, season_id)
    season = await season_service.activate_season(session, season=season)
    return SeasonRead.model_validate(season)

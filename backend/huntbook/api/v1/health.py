"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from huntbook.api import deps
from huntbook.core.config import get_settings
from huntbook.services import season_service

router = APIRouter()


@router.get("", summary="Service health status")
async def healthcheck(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> dict[str, Any]:
    """Report service metadata and whether bookings can be priced right now."""
    settings = get_settings()
    season = await season_service.get_active_season(session)
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.app_env,
        "timestamp": datetime.now(UTC).isoformat(),
        "season_active": season is not None,
        "active_season": season.name if season else None,
    }

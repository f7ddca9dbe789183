"""Test fixtures for the ranch booking backend."""
from __future__ import annotations

import datetime
import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("ADMIN_API_TOKEN", "test-admin-token")
os.environ.setdefault("PAYMENT_CALLBACK_SECRET", "test-callback-secret")

from huntbook.core.config import get_settings
from huntbook.db.base import Base
from huntbook.db.session import dispose_engine, get_sessionmaker
from huntbook.main import app
from huntbook.models import SeasonRateTable
from huntbook.services.pricing_service import RateTable

SEASON_START = datetime.date(2030, 9, 1)
SEASON_END = datetime.date(2031, 1, 31)
# Calendar anchors inside the test season.
WEDNESDAY = datetime.date(2030, 10, 23)
FRIDAY = datetime.date(2030, 10, 25)
SATURDAY = FRIDAY + datetime.timedelta(days=1)
SUNDAY = FRIDAY + datetime.timedelta(days=2)

RATES = {
    "season_start": SEASON_START,
    "season_end": SEASON_END,
    "weekday_rate": 125,
    "weekend_single_day": 200,
    "weekend_two_consecutive_days": 350,
    "weekend_three_day_combo": 450,
    "add_on_rate_per_day": 500,
    "max_capacity_per_day": 100,
}


@pytest.fixture()
def rate_table() -> RateTable:
    """Reference rate table used across pricing and reservation tests."""
    return RateTable(**RATES)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def active_season(reset_database: None, db_url: str) -> SeasonRateTable:
    """Store the reference rate table as the active season."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        season = SeasonRateTable(name="Fall 2030", is_active=True, **RATES)
        session.add(season)
        await session.commit()
        await session.refresh(season)
    return season


@pytest_asyncio.fixture()
async def app_context(
    active_season: SeasonRateTable, db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client plus credentials for admin and payment callbacks."""
    settings = get_settings()
    context: dict[str, object] = {
        "season_id": active_season.id,
        "admin_headers": {"X-Admin-Token": settings.admin_api_token},
        "callback_secret": settings.payment_callback_secret,
    }
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context

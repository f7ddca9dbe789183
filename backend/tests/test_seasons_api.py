"""Season administration API tests."""
from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

NEXT_SEASON = {
    "name": "Fall 2031",
    "season_start": "2031-09-01",
    "season_end": "2032-01-31",
    "weekday_rate": 135,
    "weekend_single_day": 210,
    "weekend_two_consecutive_days": 370,
    "weekend_three_day_combo": 480,
    "add_on_rate_per_day": 550,
    "max_capacity_per_day": 80,
}


async def test_season_endpoints_require_admin_token(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    assert (await client.get("/api/v1/seasons")).status_code == 403
    wrong = await client.get("/api/v1/seasons", headers={"X-Admin-Token": "nope"})
    assert wrong.status_code == 403


async def test_season_lifecycle(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers: dict[str, str] = app_context["admin_headers"]  # type: ignore[assignment]

    created = await client.post("/api/v1/seasons", json=NEXT_SEASON, headers=headers)
    assert created.status_code == 201
    season = created.json()
    assert season["is_active"] is False
    assert season["off_season_rate"] is None

    active = await client.get("/api/v1/seasons/active", headers=headers)
    assert active.json()["id"] == str(app_context["season_id"])

    patched = await client.patch(
        f"/api/v1/seasons/{season['id']}",
        json={"off_season_rate": 95, "max_capacity_per_day": 90},
        headers=headers,
    )
    assert patched.status_code == 200
    assert patched.json()["off_season_rate"] == 95
    assert patched.json()["max_capacity_per_day"] == 90

    activated = await client.post(
        f"/api/v1/seasons/{season['id']}/activate", headers=headers
    )
    assert activated.status_code == 200
    assert activated.json()["is_active"] is True

    listing = await client.get("/api/v1/seasons", headers=headers)
    assert [item["is_active"] for item in listing.json()] == [True, False]

    quote = await client.post(
        "/api/v1/quotes", json={"dates": ["2031-09-03"], "party_size": 1}
    )
    assert quote.json()["total"] == 135


async def test_season_validation(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers: dict[str, str] = app_context["admin_headers"]  # type: ignore[assignment]

    inverted = {**NEXT_SEASON, "season_start": "2032-02-01"}
    assert (
        await client.post("/api/v1/seasons", json=inverted, headers=headers)
    ).status_code == 422

    bad_patch = await client.patch(
        f"/api/v1/seasons/{app_context['season_id']}",
        json={"season_end": "2030-01-01"},
        headers=headers,
    )
    assert bad_patch.status_code == 400

    missing = await client.post(
        "/api/v1/seasons/00000000-0000-0000-0000-000000000000/activate",
        headers=headers,
    )
    assert missing.status_code == 404

"""Load a season configuration document into the rate table store."""
from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

from huntbook.db.session import get_sessionmaker
from huntbook.services import season_service
from huntbook.services.pricing_service import SeasonConfigurationError


def load_document(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as handle:
        document = json.load(handle)
    if not isinstance(document, dict):
        raise SeasonConfigurationError("Season document must be a JSON object")
    return document


async def seed_season(path: Path, *, name: str | None = None, activate: bool = False) -> None:
    document = load_document(path)
    fields = season_service.normalize_season_document(document)
    season_name = name or document.get("name") or path.stem
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        season = await season_service.create_season(
            session, name=season_name, activate=activate, **fields
        )
    state = "active" if season.is_active else "inactive"
    print(
        f"Seeded season {season.name} ({season.season_start} to {season.season_end}), {state}."
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a hunting season rate table")
    parser.add_argument("path", type=Path, help="Season configuration JSON document")
    parser.add_argument("--name", default=None, help="Season name (defaults to file name)")
    parser.add_argument(
        "--activate", action="store_true", help="Make the seeded season the active one"
    )
    args = parser.parse_args()
    asyncio.run(seed_season(args.path, name=args.name, activate=args.activate))


if __name__ == "__main__":
    main()

"""
Seed reference data: storage locations and the EAN13 identifier type.

Run locally:
  python backend/scripts/seed_reference_data.py "Pantry" "Basement shelf"

It uses the same DATABASE_URL as the backend (dotenv supported by core.config).
Existing rows are left alone; locations match case-insensitively by name.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import func, select

from core.config import settings
from db.database import Database
from db.models import ItemIdentifierType, Location

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = ["Pantry", "Basement"]
IDENTIFIER_TYPES = ["EAN13"]


@dataclass(frozen=True)
class SeedResult:
    locations_created: int
    identifier_types_created: int


async def seed(database: Database, location_names: Sequence[str]) -> SeedResult:
    async with database.session_maker() as db:
        locations_created = 0
        for name in location_names:
            name = name.strip()
            if not name:
                continue
            res = await db.execute(select(Location).where(func.lower(Location.name) == name.lower()))
            if res.scalars().first():
                continue
            db.add(Location(name=name))
            locations_created += 1

        types_created = 0
        for type_name in IDENTIFIER_TYPES:
            res = await db.execute(select(ItemIdentifierType).where(ItemIdentifierType.name == type_name))
            if res.scalar_one_or_none():
                continue
            db.add(ItemIdentifierType(name=type_name))
            types_created += 1

        await db.commit()

    return SeedResult(locations_created=locations_created, identifier_types_created=types_created)


async def main(location_names: Sequence[str]) -> None:
    database = Database(settings.database_url, echo=settings.database_echo, ssl_enabled=settings.database_ssl)
    try:
        result = await seed(database, location_names)
    finally:
        await database.dispose()
    logger.info(
        "Done. Locations created: %s. Identifier types created: %s.",
        result.locations_created,
        result.identifier_types_created,
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("locations", nargs="*", default=DEFAULT_LOCATIONS, help="location names to ensure")
    args = parser.parse_args()
    asyncio.run(main(args.locations))

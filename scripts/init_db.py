"""Script to initialize the database."""

import asyncio
import sys
from decimal import Decimal

from clinic_scheduler.database import AsyncSessionLocal, engine
from clinic_scheduler.models import metadata
from clinic_scheduler.repositories.catalog import SqlServiceCatalog

# Starter catalog, loaded with --seed
DEFAULT_SERVICE_TYPES = [
    {"name": "Consultation", "duration_minutes": 60, "price": Decimal("150.00")},
    {"name": "Physiotherapy", "duration_minutes": 60, "price": Decimal("120.00")},
    {"name": "Follow-up", "duration_minutes": 30, "price": Decimal("80.00")},
]


async def init_db(seed: bool = False) -> None:
    """Initialize the database by creating all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    print("✓ Database initialized successfully!")

    if seed:
        async with AsyncSessionLocal() as session:
            catalog = SqlServiceCatalog(session)
            existing = {item.name for item in await catalog.list_service_types()}
            for values in DEFAULT_SERVICE_TYPES:
                if values["name"] not in existing:
                    await catalog.create_service_type(values)
        print("✓ Service types seeded")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_db(seed="--seed" in sys.argv[1:]))

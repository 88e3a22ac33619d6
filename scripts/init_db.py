"""Script to initialize the database directly from table metadata.

Intended for local development; deployed databases go through Alembic
(``python scripts/migrate.py``), which also creates the reporting views.
"""

import asyncio

from clinic_booking.database import engine
from clinic_booking.models import metadata


async def init_db() -> None:
    """Initialize the database by creating all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    await engine.dispose()
    print("✓ Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_db())

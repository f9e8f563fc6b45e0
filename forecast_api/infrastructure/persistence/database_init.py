"""Database initialization - runs on backend startup."""
import logging

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from forecast_api.config import Settings
from forecast_api.constants import DEFAULT_LOCATIONS
from forecast_api.infrastructure.persistence import models
from forecast_api.infrastructure.persistence.db import Base
from forecast_api.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


async def initialize_database(
    engine: AsyncEngine,
    session_factory: async_sessionmaker,
    settings: Settings,
):
    """Create tables, tune SQLite and seed default locations into an empty store."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.is_sqlite:
        async with engine.connect() as conn:
            # journal_mode is persistent per database file, so once is enough
            await conn.execute(text("PRAGMA journal_mode=WAL"))

    if settings.SEED_DEFAULT_LOCATIONS:
        await seed_default_locations(session_factory)

    logger.info("✅ Database schema initialized successfully")


async def seed_default_locations(session_factory: async_sessionmaker) -> int:
    """Insert the default locations when no location exists yet.

    Returns:
        Number of locations inserted
    """
    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(models.Location))
        if count:
            logger.debug(f"Skipping seed, {count} location(s) already stored")
            return 0

        now = utc_now()
        session.add_all(
            models.Location(
                latitude=latitude,
                longitude=longitude,
                name=name,
                created_at=now,
                last_used_at=now,
            )
            for latitude, longitude, name in DEFAULT_LOCATIONS
        )
        await session.commit()
        logger.info(f"Seeded {len(DEFAULT_LOCATIONS)} default locations")
        return len(DEFAULT_LOCATIONS)


async def check_database_health(session_factory: async_sessionmaker) -> bool:
    """Check that the store answers a trivial query."""
    async with session_factory() as session:
        await session.execute(text("SELECT 1"))
    return True

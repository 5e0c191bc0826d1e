"""
Startup and shutdown hooks run by the application lifespan.

Startup refuses to serve until the database answers, the auction tables exist
and legacy cover images have been moved into the ordered image list.
"""

from typing import Awaitable, Callable, List

from loguru import logger
from sqlalchemy import text

from auction.db.session import Base, async_session_factory, engine
from auction.services.catalog import CatalogService

LifecycleHook = Callable[[], Awaitable[None]]


async def connect_to_db() -> None:
    """Fail startup early when the database is unreachable."""
    logger.info(f"Checking database at {engine.url.render_as_string(hide_password=True)}")
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database unreachable: {e}")
        raise
    logger.info("Database reachable")


async def create_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")


async def backfill_legacy_images() -> None:
    """Give every item with only a legacy cover image its first image row."""
    async with async_session_factory() as session:
        migrated = await CatalogService(session).backfill_item_images()
    logger.info(f"Legacy image backfill complete ({migrated} item(s) migrated)")


async def close_db_connection() -> None:
    try:
        await engine.dispose()
    except Exception as e:
        logger.error(f"Error disposing database engine: {e}")
        return
    logger.info("Database engine disposed")


startup_event_handlers: List[LifecycleHook] = [
    connect_to_db,
    create_schema,
    backfill_legacy_images,
]

shutdown_event_handlers: List[LifecycleHook] = [
    close_db_connection,
]

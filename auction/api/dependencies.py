"""
FastAPI API dependencies.
"""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auction.db.session import async_session_factory
from auction.services.catalog import CatalogService
from auction.services.engine import AuctionEngine
from auction.services.favorites import FavoritesService
from auction.services.users import UserService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting an async database session.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_auction_engine(db: AsyncSession = Depends(get_db_session)) -> AuctionEngine:
    return AuctionEngine(db)


def get_catalog_service(db: AsyncSession = Depends(get_db_session)) -> CatalogService:
    return CatalogService(db)


def get_favorites_service(db: AsyncSession = Depends(get_db_session)) -> FavoritesService:
    return FavoritesService(db)


def get_user_service(db: AsyncSession = Depends(get_db_session)) -> UserService:
    return UserService(db)

"""Business logic for user favorites."""

from typing import List

from loguru import logger
from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from auction.core.exceptions import ItemNotFound
from auction.db.dml import upsert_insert
from auction.db.models import Favorite, Item
from auction.db.session import atomic
from auction.schemas.catalog import ItemResponse
from auction.services.catalog import build_item_responses
from auction.utils.timestamps import utcnow


class FavoritesService:
    """Per-user bookmarks of items."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_favorite(self, user_id: int, item_id: int) -> None:
        """Bookmark an item. Adding an existing favorite is a no-op."""
        async with atomic(self.db):
            found = (await self.db.execute(select(Item.id).where(Item.id == item_id))).scalar_one_or_none()
            if found is None:
                raise ItemNotFound(item_id)

            statement = (
                upsert_insert(self.db, Favorite)
                .values(user_id=user_id, item_id=item_id, created_at=utcnow())
                .on_conflict_do_nothing(index_elements=["user_id", "item_id"])
            )
            await self.db.execute(statement)

        logger.info(f"User {user_id} favorited item {item_id}")

    async def remove_favorite(self, user_id: int, item_id: int) -> bool:
        """Drop a bookmark. Returns False when there was nothing to remove."""
        async with atomic(self.db):
            result = await self.db.execute(
                delete(Favorite)
                .where(Favorite.user_id == user_id, Favorite.item_id == item_id)
                .execution_options(synchronize_session=False)
            )

        removed = bool(result.rowcount)
        logger.info(f"User {user_id} unfavorited item {item_id} (removed={removed})")
        return removed

    async def is_favorite(self, user_id: int, item_id: int) -> bool:
        query = select(exists().where(Favorite.user_id == user_id, Favorite.item_id == item_id))
        return bool((await self.db.execute(query)).scalar())

    async def list_favorites(self, user_id: int) -> List[ItemResponse]:
        """Favorited items, most recently favorited first."""
        query = (
            select(Item)
            .join(Favorite, Favorite.item_id == Item.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Item.id.desc())
            .execution_options(populate_existing=True)
        )
        items = (await self.db.execute(query)).scalars().all()
        return await build_item_responses(self.db, items)

    async def list_item_favoriters(self, item_id: int) -> List[int]:
        found = (await self.db.execute(select(Item.id).where(Item.id == item_id))).scalar_one_or_none()
        if found is None:
            raise ItemNotFound(item_id)
        query = select(Favorite.user_id).where(Favorite.item_id == item_id).order_by(Favorite.user_id)
        return list((await self.db.execute(query)).scalars())

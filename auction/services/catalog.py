"""Business logic for categories, items and item images."""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger
from sqlalchemy import delete, exists, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auction.core.exceptions import (
    CategoryExists,
    CategoryNotFound,
    DuplicatePosition,
    InvalidInputError,
    ItemNotFound,
)
from auction.core.locks import KeyedLock, item_locks
from auction.core.money import MAX_CENTS
from auction.db.models import Bid, Category, Favorite, Item, ItemImage
from auction.db.session import atomic
from auction.schemas.catalog import CategoryDeletion, CategoryResponse, ItemImageResponse, ItemResponse


async def build_item_responses(db: AsyncSession, items: Sequence[Item]) -> List[ItemResponse]:
    """Attach ordered image references to each item in one query."""
    if not items:
        return []

    query = (
        select(ItemImage.item_id, ItemImage.file_ref)
        .where(ItemImage.item_id.in_([item.id for item in items]))
        .order_by(ItemImage.item_id, ItemImage.position, ItemImage.id)
    )
    refs: Dict[int, List[str]] = defaultdict(list)
    for item_id, file_ref in (await db.execute(query)).all():
        refs[item_id].append(file_ref)

    return [ItemResponse.model_validate(item).model_copy(update={"image_refs": refs[item.id]}) for item in items]


async def delete_items_cascade(db: AsyncSession, item_ids: Sequence[int]) -> None:
    """
    Delete items and every row that depends on them.

    Dependents go first so the result is the same whether or not the backend
    enforces ``ON DELETE CASCADE``.
    """
    if not item_ids:
        return
    await db.execute(delete(Favorite).where(Favorite.item_id.in_(item_ids)))
    await db.execute(delete(ItemImage).where(ItemImage.item_id.in_(item_ids)))
    await db.execute(delete(Bid).where(Bid.item_id.in_(item_ids)))
    await db.execute(delete(Item).where(Item.id.in_(item_ids)))


class CatalogService:
    """Service for the catalog: categories, items and their images."""

    def __init__(self, db: AsyncSession, locks: KeyedLock = item_locks):
        self.db = db
        self.locks = locks

    # Categories

    async def list_categories(self) -> List[CategoryResponse]:
        result = await self.db.execute(select(Category).order_by(Category.name))
        return [CategoryResponse.model_validate(category) for category in result.scalars().all()]

    async def get_category(self, category_id: int) -> CategoryResponse:
        category = await self.db.get(Category, category_id, populate_existing=True)
        if category is None:
            raise CategoryNotFound(category_id)
        return CategoryResponse.model_validate(category)

    async def find_category_by_name(self, name: str) -> Optional[CategoryResponse]:
        """Case-insensitive lookup."""
        query = select(Category).where(func.lower(Category.name) == name.strip().lower()).limit(1)
        category = (await self.db.execute(query)).scalar_one_or_none()
        return CategoryResponse.model_validate(category) if category else None

    async def create_category(self, name: str) -> CategoryResponse:
        name = name.strip()
        if not name:
            raise InvalidInputError("Category name must not be blank")
        if await self.find_category_by_name(name):
            raise CategoryExists(name)

        category = Category(name=name)
        try:
            async with atomic(self.db):
                self.db.add(category)
                await self.db.flush()
        except IntegrityError:
            raise CategoryExists(name)

        logger.info(f"Created category {category.id} ({name})")
        return CategoryResponse.model_validate(category)

    async def ensure_category(self, name: str) -> Tuple[CategoryResponse, bool]:
        """Return the category called ``name``, creating it if needed."""
        existing = await self.find_category_by_name(name)
        if existing:
            return existing, False
        try:
            return await self.create_category(name), True
        except CategoryExists:
            # Lost a race with a concurrent create
            existing = await self.find_category_by_name(name)
            if existing is None:
                raise
            return existing, False

    async def delete_category(self, category_id: int) -> CategoryDeletion:
        """
        Delete a category with all of its items, and their bids, images and
        favorites, in a single transaction.
        """
        async with atomic(self.db):
            category = await self.db.get(Category, category_id, populate_existing=True)
            if category is None:
                logger.info(f"Category {category_id} already absent")
                return CategoryDeletion(category_id=category_id, deleted=False)

            item_ids = list((await self.db.execute(select(Item.id).where(Item.category_id == category_id))).scalars())
            await delete_items_cascade(self.db, item_ids)
            await self.db.execute(delete(Category).where(Category.id == category_id))

        logger.info(f"Deleted category {category_id} with {len(item_ids)} item(s)")
        return CategoryDeletion(category_id=category_id, deleted=True, items_removed=len(item_ids))

    # Items

    async def create_item(
        self,
        seller_id: int,
        category_id: int,
        title: str,
        description: Optional[str],
        start_price: int,
        images: Sequence[str] = (),
    ) -> ItemResponse:
        """Create a new item; images get positions 0..N-1 in the given order."""
        title = title.strip()
        if not title:
            raise InvalidInputError("Item title must not be blank")
        if isinstance(start_price, bool) or not isinstance(start_price, int) or start_price <= 0:
            raise InvalidInputError("Start price must be a positive integer", start_price=start_price)
        if start_price > MAX_CENTS:
            raise InvalidInputError("Start price exceeds supported range", start_price=start_price)

        images = list(images)
        async with atomic(self.db):
            if await self.db.get(Category, category_id, populate_existing=True) is None:
                raise CategoryNotFound(category_id)

            item = Item(
                seller_id=seller_id,
                category_id=category_id,
                title=title,
                description=description,
                start_price=start_price,
                image_file_id=images[0] if images else None,
            )
            self.db.add(item)
            await self.db.flush()

            for position, file_ref in enumerate(images):
                self.db.add(ItemImage(item_id=item.id, file_ref=file_ref, position=position))

        logger.info(f"Created item {item.id} in category {category_id} for seller {seller_id}")
        return ItemResponse.model_validate(item).model_copy(update={"image_refs": images})

    async def get_item(self, item_id: int) -> ItemResponse:
        query = select(Item).where(Item.id == item_id).execution_options(populate_existing=True)
        item = (await self.db.execute(query)).scalar_one_or_none()
        if item is None:
            raise ItemNotFound(item_id)
        return (await build_item_responses(self.db, [item]))[0]

    async def list_items_by_category(self, category_id: int) -> List[ItemResponse]:
        """Items of a category, newest first."""
        await self.get_category(category_id)
        query = (
            select(Item)
            .where(Item.category_id == category_id)
            .order_by(Item.created_at.desc(), Item.id.desc())
            .execution_options(populate_existing=True)
        )
        items = (await self.db.execute(query)).scalars().all()
        return await build_item_responses(self.db, items)

    async def delete_item(self, item_id: int) -> bool:
        """Delete one item with its bids, images and favorites."""
        async with self.locks.hold(item_id):
            async with atomic(self.db):
                query = select(Item.id).where(Item.id == item_id).with_for_update()
                found = (await self.db.execute(query)).scalar_one_or_none()
                if found is None:
                    return False
                await delete_items_cascade(self.db, [item_id])

        logger.info(f"Deleted item {item_id}")
        return True

    async def list_new_items(self) -> List[ItemResponse]:
        """Items not yet announced to users, newest first."""
        query = (
            select(Item)
            .where(Item.is_new.is_(True))
            .order_by(Item.created_at.desc(), Item.id.desc())
            .execution_options(populate_existing=True)
        )
        items = (await self.db.execute(query)).scalars().all()
        return await build_item_responses(self.db, items)

    async def mark_items_announced(self, item_ids: Sequence[int]) -> int:
        if not item_ids:
            return 0
        async with atomic(self.db):
            result = await self.db.execute(
                update(Item).where(Item.id.in_(list(item_ids))).values(is_new=False).execution_options(
                    synchronize_session=False
                )
            )
        logger.info(f"Cleared new-lot flag on {result.rowcount} item(s)")
        return int(result.rowcount)

    # Images

    async def list_item_images(self, item_id: int) -> List[ItemImageResponse]:
        query = select(ItemImage).where(ItemImage.item_id == item_id).order_by(ItemImage.position, ItemImage.id)
        images = (await self.db.execute(query)).scalars().all()
        return [ItemImageResponse.model_validate(image) for image in images]

    async def reorder_images(
        self,
        item_id: int,
        file_refs: Sequence[str],
        positions: Optional[Sequence[int]] = None,
    ) -> List[ItemImageResponse]:
        """
        Replace the image list of an item.

        Either the whole new list is stored or, on any error, the previous
        list is left as it was.
        """
        file_refs = list(file_refs)
        positions = list(positions) if positions is not None else list(range(len(file_refs)))
        if len(positions) != len(file_refs):
            raise InvalidInputError(
                "positions and file_refs must have the same length",
                file_refs=len(file_refs),
                positions=len(positions),
            )
        if any(position < 0 for position in positions):
            raise InvalidInputError("Image positions must not be negative")
        seen = set()
        for position in positions:
            if position in seen:
                raise DuplicatePosition(item_id, position)
            seen.add(position)

        placements = sorted(zip(positions, file_refs))
        try:
            async with atomic(self.db):
                query = select(Item).where(Item.id == item_id).with_for_update().execution_options(populate_existing=True)
                item = (await self.db.execute(query)).scalar_one_or_none()
                if item is None:
                    raise ItemNotFound(item_id)

                await self.db.execute(delete(ItemImage).where(ItemImage.item_id == item_id))
                for position, file_ref in placements:
                    self.db.add(ItemImage(item_id=item_id, file_ref=file_ref, position=position))
                item.image_file_id = placements[0][1] if placements else None
                await self.db.flush()
        except IntegrityError:
            logger.warning(f"Rejected image reorder for item {item_id}: unique position violated")
            raise DuplicatePosition(item_id)

        logger.info(f"Replaced images of item {item_id} ({len(placements)} image(s))")
        return [ItemImageResponse(file_ref=file_ref, position=position) for position, file_ref in placements]

    async def backfill_item_images(self) -> int:
        """
        Copy the legacy single image of each item into the ordered image list.

        Only items that have a legacy image and no image rows are touched, so
        running this repeatedly is safe.
        """
        has_images = exists().where(ItemImage.item_id == Item.id)
        query = select(Item.id, Item.image_file_id).where(Item.image_file_id.is_not(None), ~has_images)

        async with atomic(self.db):
            rows = (await self.db.execute(query)).all()
            for item_id, file_ref in rows:
                self.db.add(ItemImage(item_id=item_id, file_ref=file_ref, position=0))

        if rows:
            logger.info(f"Backfilled cover image for {len(rows)} item(s)")
        return len(rows)

"""
Tests for categories, items and item images.
"""

import pytest
from sqlalchemy import delete, func, select

from auction.core.exceptions import (
    CategoryExists,
    CategoryNotFound,
    DuplicatePosition,
    InvalidInputError,
    ItemNotFound,
)
from auction.db.models import Bid, Category, Favorite, Item, ItemImage
from auction.services.catalog import CatalogService
from auction.services.engine import AuctionEngine
from auction.services.favorites import FavoritesService

pytestmark = pytest.mark.asyncio


async def count(db_session, model) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar_one()


async def test_create_item_assigns_image_positions(db_session, make_item):
    item = await make_item(images=["photo-a", "photo-b", "photo-c"])

    assert item.is_open is True
    assert item.is_new is True
    assert item.image_file_id == "photo-a"
    assert item.image_refs == ["photo-a", "photo-b", "photo-c"]

    images = await CatalogService(db_session).list_item_images(item.id)
    assert [(image.position, image.file_ref) for image in images] == [
        (0, "photo-a"),
        (1, "photo-b"),
        (2, "photo-c"),
    ]


@pytest.mark.parametrize("start_price", [0, -100, True, 2**63, 2**64])
async def test_create_item_rejects_bad_start_price(make_item, start_price):
    with pytest.raises(InvalidInputError):
        await make_item(start_price=start_price)


async def test_create_item_rejects_blank_title(make_item):
    with pytest.raises(InvalidInputError):
        await make_item(title="   ")


async def test_create_item_in_missing_category(db_session, make_item):
    with pytest.raises(CategoryNotFound):
        await make_item(category_id=4242)

    assert await count(db_session, Item) == 0


async def test_get_item(db_session, make_item):
    created = await make_item(images=["cover"])

    fetched = await CatalogService(db_session).get_item(created.id)

    assert fetched.model_dump(exclude={"created_at"}) == created.model_dump(exclude={"created_at"})


async def test_get_missing_item(db_session):
    with pytest.raises(ItemNotFound):
        await CatalogService(db_session).get_item(31337)


async def test_duplicate_category_is_rejected(db_session, category):
    service = CatalogService(db_session)

    with pytest.raises(CategoryExists):
        await service.create_category("  cameras ")

    assert [c.name for c in await service.list_categories()] == ["Cameras"]


async def test_ensure_category(db_session, category):
    service = CatalogService(db_session)

    existing, created = await service.ensure_category("CAMERAS")
    assert existing.id == category.id
    assert created is False

    fresh, created = await service.ensure_category("Watches")
    assert created is True
    assert (await service.find_category_by_name("watches")).id == fresh.id


async def test_list_items_by_category_newest_first(db_session, make_item, category):
    older = await make_item(title="Older")
    newer = await make_item(title="Newer")

    items = await CatalogService(db_session).list_items_by_category(category.id)

    assert [item.id for item in items] == [newer.id, older.id]


async def test_reorder_with_duplicate_positions_keeps_old_list(db_session, make_item):
    item = await make_item(images=["a", "b"])
    service = CatalogService(db_session)

    with pytest.raises(DuplicatePosition):
        await service.reorder_images(item.id, ["x", "y"], positions=[0, 0])

    images = await service.list_item_images(item.id)
    assert [image.file_ref for image in images] == ["a", "b"]


async def test_reorder_with_mismatched_positions(db_session, make_item):
    item = await make_item(images=["a"])

    with pytest.raises(InvalidInputError):
        await CatalogService(db_session).reorder_images(item.id, ["x", "y"], positions=[0])


async def test_reorder_replaces_images_and_cover(db_session, make_item):
    item = await make_item(images=["a", "b"])
    service = CatalogService(db_session)

    result = await service.reorder_images(item.id, ["c", "b", "a"], positions=[2, 0, 1])

    assert [(image.position, image.file_ref) for image in result] == [(0, "b"), (1, "a"), (2, "c")]
    assert [image.file_ref for image in await service.list_item_images(item.id)] == ["b", "a", "c"]
    assert (await service.get_item(item.id)).image_file_id == "b"


async def test_reorder_to_empty_clears_cover(db_session, make_item):
    item = await make_item(images=["a"])
    service = CatalogService(db_session)

    assert await service.reorder_images(item.id, []) == []
    assert (await service.get_item(item.id)).image_file_id is None


async def test_reorder_missing_item(db_session):
    with pytest.raises(ItemNotFound):
        await CatalogService(db_session).reorder_images(999, ["a"])


async def test_delete_category_removes_dependents(db_session, make_item, category):
    first = await make_item(images=["a", "b"])
    second = await make_item(images=["c"])
    await AuctionEngine(db_session).place_bid(first.id, 1, 150)
    await AuctionEngine(db_session).place_bid(second.id, 2, 175)
    await FavoritesService(db_session).add_favorite(1, second.id)

    result = await CatalogService(db_session).delete_category(category.id)

    assert result.deleted is True
    assert result.items_removed == 2
    for model in (Category, Item, ItemImage, Bid, Favorite):
        assert await count(db_session, model) == 0


async def test_delete_missing_category(db_session):
    result = await CatalogService(db_session).delete_category(8080)

    assert result.deleted is False
    assert result.items_removed == 0


async def test_storage_cascade_on_raw_delete(db_session, make_item, category):
    item = await make_item(images=["a"])
    await AuctionEngine(db_session).place_bid(item.id, 1, 150)
    await FavoritesService(db_session).add_favorite(1, item.id)

    await db_session.execute(delete(Category).where(Category.id == category.id))
    await db_session.commit()

    for model in (Item, ItemImage, Bid, Favorite):
        assert await count(db_session, model) == 0


async def test_delete_item(db_session, make_item):
    keep = await make_item(title="Keep")
    drop = await make_item(title="Drop", images=["a"])
    await AuctionEngine(db_session).place_bid(drop.id, 1, 150)
    service = CatalogService(db_session)

    assert await service.delete_item(drop.id) is True
    assert await service.delete_item(drop.id) is False

    assert (await service.get_item(keep.id)).id == keep.id
    assert await count(db_session, Bid) == 0
    assert await count(db_session, ItemImage) == 0


async def test_backfill_item_images_is_idempotent(db_session, category):
    db_session.add_all(
        [
            Item(seller_id=1, category_id=category.id, title="Legacy", start_price=100, image_file_id="legacy"),
            Item(seller_id=1, category_id=category.id, title="No image", start_price=100),
        ]
    )
    await db_session.commit()
    service = CatalogService(db_session)

    assert await service.backfill_item_images() == 1
    assert await service.backfill_item_images() == 0

    refs = (await db_session.execute(select(ItemImage.file_ref, ItemImage.position))).all()
    assert [tuple(row) for row in refs] == [("legacy", 0)]


async def test_new_items_until_announced(db_session, make_item):
    first = await make_item(title="First")
    second = await make_item(title="Second")
    service = CatalogService(db_session)

    assert [item.id for item in await service.list_new_items()] == [second.id, first.id]

    assert await service.mark_items_announced([first.id]) == 1

    assert [item.id for item in await service.list_new_items()] == [second.id]
    assert await service.mark_items_announced([]) == 0

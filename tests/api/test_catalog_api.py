import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_create_and_list_categories(client: AsyncClient):
    await client.post("/api/v1/categories", json={"name": "Watches"})
    await client.post("/api/v1/categories", json={"name": " Art "})

    response = await client.get("/api/v1/categories")

    assert [category["name"] for category in response.json()] == ["Art", "Watches"]


async def test_duplicate_category(client: AsyncClient):
    await client.post("/api/v1/categories", json={"name": "Watches"})

    response = await client.post("/api/v1/categories", json={"name": "watches"})

    assert response.status_code == 409
    assert response.json()["code"] == "CATEGORY_EXISTS"


async def test_blank_category_name(client: AsyncClient):
    response = await client.post("/api/v1/categories", json={"name": "   "})

    assert response.status_code == 400


async def test_delete_category_cascades(client: AsyncClient):
    category = (await client.post("/api/v1/categories", json={"name": "Watches"})).json()
    item = (
        await client.post(
            "/api/v1/items",
            json={"seller_id": 1, "category_id": category["id"], "title": "Watch", "start_price": 500},
        )
    ).json()
    await client.post(f"/api/v1/items/{item['id']}/bids", json={"bidder_id": 2, "amount": 600})

    response = await client.delete(f"/api/v1/categories/{category['id']}")

    assert response.status_code == 200
    assert response.json() == {"category_id": category["id"], "deleted": True, "items_removed": 1}
    assert (await client.get(f"/api/v1/items/{item['id']}")).status_code == 404

    missing = await client.delete(f"/api/v1/categories/{category['id']}")
    assert missing.json()["deleted"] is False


async def test_items_of_missing_category(client: AsyncClient):
    response = await client.get("/api/v1/categories/77/items")

    assert response.status_code == 404
    assert response.json()["code"] == "CATEGORY_NOT_FOUND"


async def test_find_category_by_name(client: AsyncClient):
    await client.post("/api/v1/categories", json={"name": "Watches"})
    await client.post("/api/v1/categories", json={"name": "Art"})

    found = await client.get("/api/v1/categories", params={"name": "WATCHES"})
    assert [category["name"] for category in found.json()] == ["Watches"]

    assert (await client.get("/api/v1/categories", params={"name": "Coins"})).json() == []


async def test_ensure_category(client: AsyncClient):
    created = await client.post("/api/v1/categories/ensure", json={"name": "Coins"})
    assert created.status_code == 201
    assert created.json()["created"] is True

    again = await client.post("/api/v1/categories/ensure", json={"name": "coins"})
    assert again.status_code == 200
    assert again.json() == {"category": created.json()["category"], "created": False}
    assert len((await client.get("/api/v1/categories")).json()) == 1

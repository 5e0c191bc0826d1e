import os
from typing import AsyncGenerator, Awaitable, Callable, Optional, Sequence

os.environ.setdefault("ENABLE_TRACING", "false")
os.environ.setdefault("JSON_LOGS", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from auction.api.dependencies import get_db_session
from auction.db import models  # noqa: F401
from auction.db.session import Base, build_engine, build_session_factory
from auction.main import app
from auction.schemas.catalog import CategoryResponse, ItemResponse
from auction.services.catalog import CatalogService

SELLER_ID = 1001

MakeItem = Callable[..., Awaitable[ItemResponse]]


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'auction_test.db'}"
    test_engine = build_engine(url, echo=False)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(db_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def category(db_session: AsyncSession) -> CategoryResponse:
    return await CatalogService(db_session).create_category("Cameras")


@pytest.fixture
def make_item(db_session: AsyncSession, category: CategoryResponse) -> MakeItem:
    async def _make(
        start_price: int = 100,
        seller_id: int = SELLER_ID,
        images: Sequence[str] = (),
        category_id: Optional[int] = None,
        title: str = "Vintage camera",
    ) -> ItemResponse:
        return await CatalogService(db_session).create_item(
            seller_id=seller_id,
            category_id=category_id if category_id is not None else category.id,
            title=title,
            description=None,
            start_price=start_price,
            images=images,
        )

    return _make


@pytest_asyncio.fixture(scope="function")
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}

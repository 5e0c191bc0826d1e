import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError, OperationalError

from auction.api.errors import create_error_response, register_exception_handlers
from auction.core.exceptions import BidTooLow


def build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/too-low")
    async def too_low():
        raise BidTooLow(500, 400)

    @app.get("/integrity")
    async def integrity():
        raise IntegrityError("INSERT", {}, Exception("unique"))

    @app.get("/database")
    async def database():
        raise OperationalError("SELECT", {}, Exception("gone"))

    @app.get("/typed/{value}")
    async def typed(value: int):
        return {"value": value}

    return app


@pytest_asyncio.fixture
async def error_client():
    transport = ASGITransport(app=build_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_domain_error_keeps_details(error_client):
    response = await error_client.get("/too-low")

    assert response.status_code == 409
    assert response.json() == {
        "detail": "Bid must exceed 500",
        "code": "BID_TOO_LOW",
        "current_highest": 500,
        "amount": 400,
    }


@pytest.mark.asyncio
async def test_validation_error(error_client):
    response = await error_client.get("/typed/abc")

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"
    assert "path.value" in response.json()["detail"]


@pytest.mark.asyncio
async def test_integrity_error(error_client):
    response = await error_client.get("/integrity")

    assert response.status_code == 409
    assert response.json()["code"] == "DATABASE_INTEGRITY_ERROR"


@pytest.mark.asyncio
async def test_database_error(error_client):
    response = await error_client.get("/database")

    assert response.status_code == 500
    assert response.json()["code"] == "DATABASE_ERROR"


def test_create_error_response():
    assert create_error_response("X", "boom") == {"detail": "boom", "code": "X"}

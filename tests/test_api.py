"""Test the HTTP surface: status codes, payload shapes and error mapping."""
import asyncio
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from api.main import app
from core.database import get_session, get_session_factory
from core.models.base import Base
from verticals.bike_shop.seed import seed_catalog
from verticals.bike_shop.service import ConfigurationService, get_configuration_service

from conftest import small_catalog, small_inventory

BASE = "/api/bike-shop/products/1"
COMPLETE = [1, 4, 6, 10, 12]


async def _create_and_seed(url):
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_sessionmaker(engine)() as session:
        await seed_catalog(session)
        await session.commit()
    await engine.dispose()


@pytest.fixture
def client(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}"
    asyncio.run(_create_and_seed(url))

    # NullPool: TestClient runs each request on its own event loop
    engine = create_async_engine(url, poolclass=NullPool)
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_session_factory] = lambda: factory
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert client.get("/health").headers["X-Request-ID"]


def test_list_options_with_selection(client):
    response = client.get(f"{BASE}/part-types/3/options", params={"selected": [2]})
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [o["id"] for o in body["data"]] == [6, 8]

    fat = body["data"][1]
    assert fat["inventory"]["in_stock"] is False
    assert fat["inventory"]["expected_restock_date"] == "2025-06-15"


def test_list_options_live_price(client):
    response = client.get(f"{BASE}/part-types/2/options", params={"selected": [1]})
    matte = response.json()["data"][0]
    assert Decimal(matte["final_price"]) == Decimal("50.00")
    assert matte["price_adjustments"][0]["rule_id"] == 1


def test_unknown_product_is_404(client):
    response = client.get("/api/bike-shop/products/99/part-types/1/options")
    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "NOT_FOUND"
    assert body["entity"] == "Product"
    assert body["ids"] == [99]


def test_unknown_option_is_404(client):
    response = client.post(f"{BASE}/price", json={"selections": [1, 999]})
    assert response.status_code == 404
    assert response.json()["ids"] == [999]


def test_price(client):
    response = client.post(f"{BASE}/price", json={"selections": [2, 5, 9]})
    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["total_price"]) == Decimal("297.00")
    assert [a["rule_id"] for a in body["adjustments"]] == [4]


def test_validate_valid_and_invalid(client):
    ok = client.post(f"{BASE}/validate", json={"selections": COMPLETE})
    assert ok.status_code == 200
    assert ok.json()["valid"] is True

    bad = client.post(f"{BASE}/validate", json={"selections": [2, 4, 7, 10, 12]})
    assert bad.status_code == 200
    body = bad.json()
    assert body["valid"] is False
    assert body["reason"] == "incompatible-combination"
    assert body["incompatibilities"] == [[2, 7]]


def test_too_many_selections_is_400(client):
    response = client.post(f"{BASE}/validate", json={"selections": list(range(1, 60))})
    assert response.status_code == 400


def test_store_outage_is_503(client):
    failing = ConfigurationService(small_catalog(), small_inventory(fail=True))
    app.dependency_overrides[get_configuration_service] = lambda: failing

    response = client.post(f"{BASE}/validate", json={"selections": [10, 20]})
    assert response.status_code == 503
    assert response.json()["code"] == "DATA_ACCESS_ERROR"


def test_reservation_created(client):
    response = client.post(f"{BASE}/reservations", json={"selections": COMPLETE, "quantity": 1})
    assert response.status_code == 201
    body = response.json()
    assert body["reserved"] is True
    assert Decimal(body["price"]["total_price"]) == Decimal("438.00")

    options = client.get(f"{BASE}/part-types/3/options").json()["data"]
    road = next(o for o in options if o["id"] == 6)
    assert road["inventory"]["quantity"] == 24


def test_invalid_reservation_is_422(client):
    response = client.post(f"{BASE}/reservations", json={"selections": [1, 6]})
    assert response.status_code == 422
    body = response.json()
    assert body["reserved"] is False
    assert body["validation"]["reason"] == "missing-required"


def test_short_stock_reservation_is_409(client):
    response = client.post(
        f"{BASE}/reservations",
        json={"selections": [1, 4, 7, 10, 12], "quantity": 12},
    )
    assert response.status_code == 409
    assert response.json()["detail"]["option_ids"] == [7]

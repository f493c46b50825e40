"""
Pytest configuration and fixtures.

Environment is set before any application module is imported: the JWT
handler refuses to import without a secret, and the database engine is
built from DATABASE_URL at import time.
"""
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_webpay.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OTEL_ENABLED"] = "false"
os.environ["WEBPAY_STORE_ID"] = "store-123"
os.environ["WEBPAY_SECRET_KEY"] = "secret-abc"
os.environ["WEBPAY_API_URL"] = "https://sandbox.webpay.by"
os.environ.pop("PRODUCTION_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from main import app as fastapi_app
from shared.config.database import Base, get_db
from shared.config.settings import settings
from shared.security import create_access_token


@pytest.fixture(autouse=True)
def webpay_settings(monkeypatch):
    """Known gateway configuration; individual tests override attributes."""
    monkeypatch.setattr(settings, "webpay_store_id", "store-123")
    monkeypatch.setattr(settings, "webpay_secret_key", "secret-abc")
    monkeypatch.setattr(settings, "webpay_api_url", "https://sandbox.webpay.by")
    monkeypatch.setattr(settings, "webpay_verify_callback", False)
    monkeypatch.setattr(settings, "public_base_url", "")
    monkeypatch.setattr(settings, "app_deep_link", "app://")
    return settings


@pytest.fixture
def session_factory(tmp_path):
    db_path = tmp_path / "test.db"
    # Schema through a plain sync engine so no event loop is needed here
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    # No context manager: tables come from session_factory, not the startup hook
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    token = create_access_token(data={"sub": "user-1"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def payment_request():
    return {
        "amount": 19.90,
        "currency": "BYN",
        "description": "course",
        "orderId": "ord-1",
    }

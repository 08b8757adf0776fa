import os
from typing import AsyncGenerator

# Settings are read at import time by several modules
os.environ["ENVIRONMENT"] = "local"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_URL"] = "memory://"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test_key_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test_webhook_secret"
os.environ["WHATSAPP_NUMBER"] = "+91 98765 43210"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.common.config import Settings, get_settings
from libs.db.base import Base

# Import all models so metadata includes every table
from services.store_service import models as _store_models  # noqa: F401
from tests.factories import (
    FakeCarrier,
    FakeGateway,
    StaticConfigProvider,
    StoreConfigFactory,
)

get_settings.cache_clear()
settings = get_settings()


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """
    File-backed SQLite database, for tests that need several real connections.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def store_config(db_session):
    """The store_config singleton row, as the admin settings page would leave it."""
    config = StoreConfigFactory.create()
    db_session.add(config)
    await db_session.commit()
    return config


@pytest.fixture
def test_settings() -> Settings:
    return settings


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def fake_carrier() -> FakeCarrier:
    return FakeCarrier()


@pytest.fixture
def config_provider() -> StaticConfigProvider:
    return StaticConfigProvider()


@pytest.fixture
def controller(db_session, config_provider, fake_gateway, fake_carrier, test_settings):
    from services.store_service.services.lifecycle import OrderLifecycleController

    return OrderLifecycleController(
        db_session,
        config_provider,
        lambda: fake_gateway,
        test_settings,
        carrier_factory=lambda: fake_carrier,
    )


@pytest_asyncio.fixture
async def client(db_session, fake_gateway, fake_carrier) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the store app, overriding DB, admin auth and
    the Razorpay / Shiprocket clients.
    """
    from libs.auth.dependencies import require_admin
    from libs.auth.models import AuthUser
    from libs.db.session import get_async_db
    from services.store_service.app.main import app
    from services.store_service.dependencies import (
        get_carrier_factory,
        get_gateway_factory,
    )

    async def _admin():
        return AuthUser(user_id="admin-1", email="admin@intru.in", role="admin")

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[require_admin] = _admin
    app.dependency_overrides[get_gateway_factory] = lambda: (lambda: fake_gateway)
    app.dependency_overrides[get_carrier_factory] = lambda: (lambda: fake_carrier)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()

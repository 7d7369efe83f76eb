"""Service test fixtures — SQLite-backed pool + FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite database file with the full schema
    - The pool is a real queue pool, so checked-out connections can be counted
    - Each test builds its own app (own settings, own rate limiter) and injects
      the test pool as app.state.db; lifespan is not run

Design Decisions:
    - SQLite file over :memory: — several pooled connections must see the same data
    - ON CONFLICT / RETURNING are supported by SQLite, so upserts run for real
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from caramel.config import Settings
from caramel.db.base import Base
from caramel.infrastructure.database import DatabaseSessionManager
from caramel.main import create_app
from caramel.models import Category, Product, SiteSetting


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'caramel.db'}",
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=0,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def db(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///unused.db",
        environment="development",
        log_format="text",
    )


@pytest.fixture
def app(settings, db):
    application = create_app(settings)
    application.state.db = db
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def seed_catalog(test_db):
    """Three categories, four active products and one retired product."""
    cakes = Category(name="Cakes", slug="cakes")
    candies = Category(name="Candies", slug="candies")
    archive = Category(name="Archive", slug="archive")
    test_db.add_all([cakes, candies, archive])
    await test_db.flush()

    day0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
    test_db.add_all([
        Product(
            name="Honey Cake", description="Layered honey sponge",
            price=Decimal("12.50"), category_id=cakes.id,
            created_at=day0 + timedelta(days=1),
        ),
        Product(
            name="Napoleon", description="Puff pastry with custard",
            price=Decimal("14.00"), category_id=cakes.id,
            created_at=day0 + timedelta(days=2),
        ),
        Product(
            name="Salted Caramel Truffle", description="Dark chocolate shell",
            price=Decimal("2.20"), category_id=candies.id,
            created_at=day0 + timedelta(days=3),
        ),
        Product(
            name="Retired Fudge", description="Soft caramel fudge",
            price=Decimal("3.00"), category_id=candies.id, is_active=False,
            created_at=day0 + timedelta(days=4),
        ),
        Product(
            name="Gift Box", description="Assorted sweets",
            price=Decimal("25.00"), category_id=None,
            created_at=day0 + timedelta(days=5),
        ),
    ])
    await test_db.commit()
    return {"cakes": cakes, "candies": candies, "archive": archive}


@pytest.fixture
async def seed_settings(test_db):
    test_db.add_all([
        SiteSetting(
            setting_key="phone", setting_value="+7 900 000-00-00",
            description="Contact phone",
        ),
        SiteSetting(
            setting_key="min_order", setting_value="1500",
            description="Minimum order amount",
        ),
        SiteSetting(
            setting_key="delivery_days", setting_value="2",
            description=None,
        ),
    ])
    await test_db.commit()

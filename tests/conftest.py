from datetime import date, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app import app
from app.core.config import Config
from app.core.dependencies import get_db
from app.db.base import Base
from app.models import Coupon, Service


def next_bookable_day(today: date) -> date:
    """First day after ``today`` that is not a Sunday."""
    day = today + timedelta(days=1)
    while day.weekday() == 6:
        day += timedelta(days=1)
    return day


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": Config.ADMIN_API_KEY}


@pytest.fixture
def make_service(db):
    async def _make_service(**kwargs):
        data = {"name": "Laptop Screen Repair", "price": 1000.0, "display_order": 0}
        data.update(kwargs)
        service = Service(**data)
        db.add(service)
        await db.commit()
        await db.refresh(service)
        return service

    return _make_service


@pytest.fixture
def make_coupon(db):
    async def _make_coupon(**kwargs):
        now = datetime.now()
        data = {
            "code": "SAVE20",
            "discount_percent": 20,
            "valid_from": now - timedelta(days=1),
            "valid_until": now + timedelta(days=30),
            "is_active": True,
            "max_uses": None,
            "current_uses": 0,
        }
        data.update(kwargs)
        coupon = Coupon(**data)
        db.add(coupon)
        await db.commit()
        await db.refresh(coupon)
        return coupon

    return _make_coupon

"""Shared fixtures: in-memory database, seeded data, HTTP client and tokens."""

import os

# Provide default settings so tests run without a real database or secrets.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("ENV_MODE", "development")

from decimal import Decimal
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from restaurant_ops.auth import create_access_token
from restaurant_ops.database import Base, get_db
from restaurant_ops.main import app
from restaurant_ops.models import MenuItem, MenuItemStatus, RestaurantTable, StaffProfile, User, UserRole


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def seeded(session_maker):
    """
    Accounts: admin, staff, customers Carl (A) and Dana (B).
    Menu: Pizza 10.00, Garlic Bread 5.00, Truffle Risotto 24.50 (out of stock).
    Tables: numbers 1-8, inserted first so their ids equal their numbers.
    """
    async with session_maker() as session:
        tables = [RestaurantTable(table_number=n, seats=2 if n <= 4 else 6) for n in range(1, 9)]
        session.add_all(tables)
        await session.commit()

        admin = User(full_name="Alice Admin", email="admin@test.local", password_hash="x", role=UserRole.ADMIN)
        staff = User(full_name="Sam Staff", email="staff@test.local", password_hash="x", role=UserRole.STAFF)
        staff.staff_profile = StaffProfile(position="Waiter")
        carl = User(full_name="Carl Customer", email="carl@test.local", password_hash="x", role=UserRole.CUSTOMER)
        dana = User(full_name="Dana Customer", email="dana@test.local", password_hash="x", role=UserRole.CUSTOMER)
        pizza = MenuItem(name="Pizza", price=Decimal("10.00"), category="Mains")
        bread = MenuItem(name="Garlic Bread", price=Decimal("5.00"), category="Sides")
        risotto = MenuItem(
            name="Truffle Risotto",
            price=Decimal("24.50"),
            category="Mains",
            status=MenuItemStatus.OUT_OF_STOCK,
        )
        session.add_all([admin, staff, carl, dana, pizza, bread, risotto])
        await session.commit()

        return SimpleNamespace(
            admin_id=admin.id,
            staff_id=staff.id,
            carl_id=carl.id,
            dana_id=dana.id,
            pizza_id=pizza.id,
            bread_id=bread.id,
            risotto_id=risotto.id,
            table_ids=[t.id for t in tables],
        )


@pytest.fixture
def headers(seeded):
    """Authorization headers per role."""

    def bearer(user_id: int, role: UserRole) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return SimpleNamespace(
        admin=bearer(seeded.admin_id, UserRole.ADMIN),
        staff=bearer(seeded.staff_id, UserRole.STAFF),
        carl=bearer(seeded.carl_id, UserRole.CUSTOMER),
        dana=bearer(seeded.dana_id, UserRole.CUSTOMER),
    )


@pytest.fixture
async def client(session_maker):
    async def _session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

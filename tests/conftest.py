"""
Общие фикстуры: in-memory SQLite, засеянный мир и HTTP-клиент.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")

from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from food_storefront.crud.access import Actor
from food_storefront.db.base import Base
from food_storefront.db.deps import get_async_session
from food_storefront.main import app
from food_storefront.models import CartItem, Product, Restaurant, RoleEnum, User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
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


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def world(session_factory):
    """
    Два покупателя, два владельца одобренных ресторанов X и Y,
    владелец неодобренного Z и администратор.

    X: A (10.00), B (5.00), D (недоступен); Y: C (7.50); Z: E (3.00).
    """
    async with session_factory() as session:
        alice = User(email="alice@example.com", full_name="Alice", role=RoleEnum.customer)
        bob = User(email="bob@example.com", role=RoleEnum.customer)
        owner_x = User(email="x@example.com", full_name="Owner X", role=RoleEnum.restaurant)
        owner_y = User(email="y@example.com", full_name="Owner Y", role=RoleEnum.restaurant)
        owner_z = User(email="z@example.com", full_name="Owner Z", role=RoleEnum.restaurant)
        admin = User(email="admin@example.com", full_name="Admin", role=RoleEnum.admin)
        session.add_all([alice, bob, owner_x, owner_y, owner_z, admin])
        await session.flush()

        x = Restaurant(owner_id=owner_x.id, name="Pizza X", approved=True)
        y = Restaurant(owner_id=owner_y.id, name="Sushi Y", approved=True)
        z = Restaurant(owner_id=owner_z.id, name="Hidden Z", approved=False)
        session.add_all([x, y, z])
        await session.flush()

        a = Product(restaurant_id=x.id, name="Margherita", category="pizza", price=Decimal("10.00"))
        b = Product(restaurant_id=x.id, name="Lemonade", category="drinks", price=Decimal("5.00"))
        d = Product(restaurant_id=x.id, name="Calzone", category="pizza", price=Decimal("12.00"), available=False)
        c = Product(restaurant_id=y.id, name="Maki", category="rolls", price=Decimal("7.50"))
        e = Product(restaurant_id=z.id, name="Secret", price=Decimal("3.00"))
        session.add_all([a, b, c, d, e])
        await session.commit()

        return SimpleNamespace(
            alice=Actor(alice.id, RoleEnum.customer),
            bob=Actor(bob.id, RoleEnum.customer),
            owner_x=Actor(owner_x.id, RoleEnum.restaurant),
            owner_y=Actor(owner_y.id, RoleEnum.restaurant),
            owner_z=Actor(owner_z.id, RoleEnum.restaurant),
            admin=Actor(admin.id, RoleEnum.admin),
            x=x.id,
            y=y.id,
            z=z.id,
            a=a.id,
            b=b.id,
            c=c.id,
            d=d.id,
            e=e.id,
        )


@pytest_asyncio.fixture
async def fill_cart(db):
    """Кладёт позиции в корзину напрямую, минуя проверки add_item."""

    async def _fill(actor, *lines):
        for product_id, quantity in lines:
            db.add(CartItem(customer_id=actor.id, product_id=product_id, quantity=quantity))
        await db.commit()

    return _fill


@pytest_asyncio.fixture
async def client(session_factory):
    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = _override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth(actor) -> dict:
    return {"X-User-Id": str(actor.id)}

import os

os.environ["ENVIRONMENT"] = "local"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTH_SECRET_KEY"] = "test-secret-key-" + "x" * 48
os.environ["CART_STORE_BACKEND"] = "memory"
os.environ["RATE_LIMIT_PER_MINUTE"] = "10000"
os.environ["CHECKOUT_RATE_LIMIT"] = "1000/minute"

from collections.abc import AsyncGenerator  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402
from src.core.database.session import get_db_session  # noqa: E402
from src.core.dependencies import get_key_value_service  # noqa: E402
from src.domain.enums import UserRole  # noqa: E402
from src.domain.models import Category, Product  # noqa: E402
from src.domain.schemas import AuthSessionState  # noqa: E402
from src.domain.services.security_service import security_service  # noqa: E402
from src.libs.kvstore import ChannelConfiguration, KeyValueService, MemoryKeyValueConfiguration  # noqa: E402
from src.libs.kvstore.providers.memory import MemoryChangeChannel, MemoryKeyValueProvider  # noqa: E402
from src.libs.throttler import limiter  # noqa: E402
from src.main import app  # noqa: E402


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def kv_provider() -> MemoryKeyValueProvider:
    return MemoryKeyValueProvider(MemoryKeyValueConfiguration())


@pytest.fixture
def change_channel() -> MemoryChangeChannel:
    return MemoryChangeChannel(ChannelConfiguration())


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    kv_provider: MemoryKeyValueProvider,
    change_channel: MemoryChangeChannel,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test database and an isolated cart store."""

    async def _get_test_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    kv_service = KeyValueService(provider=kv_provider, channel=change_channel)

    app.dependency_overrides[get_db_session] = _get_test_session
    app.dependency_overrides[get_key_value_service] = lambda: kv_service
    await limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def customer() -> AuthSessionState:
    return AuthSessionState(user_id="user-kampala-1", email="kato@example.com")


@pytest.fixture
def other_customer() -> AuthSessionState:
    return AuthSessionState(user_id="user-entebbe-2", email="nakato@example.com")


@pytest.fixture
def admin() -> AuthSessionState:
    return AuthSessionState(user_id="admin-1", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers():
    """Build bearer headers for a session state."""

    def _headers(state: AuthSessionState) -> dict[str, str]:
        token = security_service.issue_session_token(state).access_token
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_product(db_session: AsyncSession):
    """Insert a product into the ledger."""
    counter = {"value": 0}

    async def _make(**overrides: Any) -> Product:
        counter["value"] += 1
        data: dict[str, Any] = {
            "name": f"Brake Pads {counter['value']}",
            "slug": f"brake-pads-{counter['value']}",
            "price": Decimal("1000"),
            "stock": 10,
            "is_active": True,
        }
        data.update(overrides)

        product = Product(**data)
        db_session.add(product)
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_category(db_session: AsyncSession):
    async def _make(**overrides: Any) -> Category:
        data: dict[str, Any] = {"name": "Brakes", "slug": "brakes"}
        data.update(overrides)

        category = Category(**data)
        db_session.add(category)
        await db_session.commit()
        await db_session.refresh(category)
        return category

    return _make

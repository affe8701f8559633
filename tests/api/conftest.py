"""API test infrastructure: async httpx client over an in-memory SQLite database."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.security import create_access_token
from app.models.database import Base, get_db
from app.models.user import User
from app.services.ai_client import get_ai_client
from tests.factories import FakeCompletionClient

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        # Enable foreign key enforcement for SQLite
        await conn.exec_driver_sql("PRAGMA foreign_keys = ON")
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


# ---------------------------------------------------------------------------
# Network isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def no_external_calls():
    """Geocoding and IP lookups fail fast unless a test patches them."""
    offline = AsyncMock(side_effect=httpx.ConnectError("network disabled in tests"))
    with patch("app.services.geocoding.reverse_geocode", offline), \
         patch("app.services.geocoding.forward_geocode", offline), \
         patch("app.services.geocoding.lookup_ip", offline), \
         patch("app.services.weather_service.settings.weather_api_key", None):
        yield


@pytest.fixture
def history_task():
    """The Celery task, patched at its source module."""
    with patch("app.worker.tasks.record_recommendation_history") as task:
        task.apply_async.return_value = MagicMock(id="celery-task-id")
        yield task


# ---------------------------------------------------------------------------
# FastAPI app with overridden dependencies
# ---------------------------------------------------------------------------

@pytest.fixture
def ai_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest_asyncio.fixture
async def app(session_factory, ai_client):
    from app.main import create_app

    application = create_app()

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_ai_client] = lambda: ai_client

    # Reset rate limiters between tests
    from app.core.rate_limit import address_limiter, recommendation_limiter
    recommendation_limiter.reset()
    address_limiter.reset()

    yield application

    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def user(session_factory) -> User:
    async with session_factory() as session:
        account = User(
            id=uuid.uuid4(),
            email="ada@solarwise.ng",
            username="ada",
            full_name="Ada Obi",
            auth_method="traditional",
            is_verified=True,
        )
        session.add(account)
        await session.commit()
        return account


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    """Authorization headers for authenticated requests."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}

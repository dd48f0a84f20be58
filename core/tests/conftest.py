"""Shared fixtures: a temporary SQLite database and an app wired to it."""

from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from orthoiq.api import router
from orthoiq.core.config import settings
from orthoiq.core.db.database import Base, async_get_db
from orthoiq.core.setup import create_application
from orthoiq.core.utils.cache import async_get_redis
from orthoiq.services.agents_client import AgentsServiceClient, get_agents_client

ADMIN_KEY = "test-admin-key"


class MutableClock:
    """Injectable clock for day-boundary tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def agents_down(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("agents service unreachable", request=request)


@pytest.fixture
def clock():
    return MutableClock(datetime(2026, 10, 16, 15, 30, tzinfo=UTC))


@pytest_asyncio.fixture
async def engine(tmp_path):
    db_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'orthoiq.db'}",
        connect_args={"timeout": 30},
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def agents_transport():
    """Swap in another ``httpx.MockTransport`` to simulate the agents service."""
    return {"transport": httpx.MockTransport(agents_down)}


@pytest.fixture
def fake_redis():
    redis = Mock()
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def app(session_factory, agents_transport, fake_redis, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_KEY)

    @asynccontextmanager
    async def no_lifespan(_app):
        yield

    application = create_application(router=router, settings=settings, lifespan=no_lifespan)

    async def override_db():
        async with session_factory() as session:
            yield session

    async def override_redis():
        yield fake_redis

    def override_agents():
        return AgentsServiceClient(base_url="http://agents.test", timeout=1.0, transport=agents_transport["transport"])

    application.dependency_overrides[async_get_db] = override_db
    application.dependency_overrides[async_get_redis] = override_redis
    application.dependency_overrides[get_agents_client] = override_agents
    return application


@pytest_asyncio.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config import settings


class Base(DeclarativeBase, MappedAsDataclass):
    pass


# PostgreSQL (Neon in production) holds counters, consultations and milestones
DATABASE_URI = settings.POSTGRES_URI
DATABASE_PREFIX = settings.POSTGRES_ASYNC_PREFIX
DATABASE_URL = f"{DATABASE_PREFIX}{DATABASE_URI}"


def build_connect_args() -> dict[str, Any]:
    """asyncpg connection arguments; every round trip is bounded by a timeout."""
    connect_args: dict[str, Any] = {
        "timeout": settings.POSTGRES_CONNECT_TIMEOUT,
        "command_timeout": settings.POSTGRES_COMMAND_TIMEOUT,
    }
    if settings.POSTGRES_SSL:
        connect_args["ssl"] = "require"
    return connect_args


async_engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    pool_pre_ping=True,
    connect_args=build_connect_args(),
)
local_session = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


async def async_get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get PostgreSQL database session."""
    async with local_session() as db:
        yield db

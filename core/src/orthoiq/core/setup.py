import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import _AsyncGeneratorContextManager, asynccontextmanager
from typing import Any

from fastapi import APIRouter, FastAPI

from ..middleware.client_cache_middleware import ClientCacheMiddleware
from ..models import Consultation, MDReviewEvent, MilestoneFeedback, Question, RateLimit  # noqa: F401
from .config import (
    AppSettings,
    ClientSideCacheSettings,
    EnvironmentOption,
    EnvironmentSettings,
    LoggingSettings,
    PostgresSettings,
    RedisCacheSettings,
)
from .db.database import Base
from .db.database import async_engine as engine
from .logger import configure_logging
from .utils import cache

LOGGER = logging.getLogger(__name__)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def lifespan_factory(
    settings: (
        PostgresSettings | RedisCacheSettings | AppSettings | EnvironmentSettings | ClientSideCacheSettings
    ),
    create_tables_on_start: bool = True,
) -> Callable[[FastAPI], _AsyncGeneratorContextManager[Any]]:
    """Factory to create a lifespan async context manager for a FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        if isinstance(settings, RedisCacheSettings):
            cache.create_redis_pool(settings.REDIS_CACHE_URL, settings.REDIS_SOCKET_TIMEOUT)

        if isinstance(settings, PostgresSettings) and create_tables_on_start:
            await create_tables()

        LOGGER.info("Application startup complete")
        try:
            yield
        finally:
            if isinstance(settings, RedisCacheSettings):
                await cache.close_redis_pool()
            await engine.dispose()
            LOGGER.info("Application shutdown complete")

    return lifespan


def create_application(
    router: APIRouter,
    settings: (
        PostgresSettings
        | RedisCacheSettings
        | AppSettings
        | ClientSideCacheSettings
        | EnvironmentSettings
        | LoggingSettings
    ),
    lifespan: Callable[[FastAPI], _AsyncGeneratorContextManager[Any]] | None = None,
    **kwargs: Any,
) -> FastAPI:
    """Creates and configures a FastAPI application based on the provided settings.

    The application gets logging configured from ``LoggingSettings``, the
    client-side cache middleware, and the API router. In production the
    interactive docs are disabled.

    Parameters
    ----------
    router : APIRouter
        The APIRouter object containing the routes to be included in the FastAPI application.

    settings
        An instance representing the settings for configuring the FastAPI application.

    lifespan
        Optional lifespan factory result; defaults to ``lifespan_factory(settings)``.

    **kwargs
        Additional keyword arguments passed directly to the FastAPI constructor.

    Returns
    -------
    FastAPI
        A fully configured FastAPI application.
    """
    if isinstance(settings, LoggingSettings):
        configure_logging(settings)

    if isinstance(settings, AppSettings):
        to_update = {
            "title": settings.APP_NAME,
            "description": settings.APP_DESCRIPTION,
            "version": settings.APP_VERSION,
        }
        kwargs.update(to_update)

    if isinstance(settings, EnvironmentSettings) and settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        kwargs.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    if lifespan is None:
        lifespan = lifespan_factory(settings)

    application = FastAPI(lifespan=lifespan, **kwargs)
    application.include_router(router)

    if isinstance(settings, ClientSideCacheSettings):
        application.add_middleware(ClientCacheMiddleware, max_age=settings.CLIENT_CACHE_MAX_AGE)

    return application

"""Tests for error translation, logging setup, cache headers and the endpoint registry."""

import logging
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler

import pytest
from fastapi import FastAPI
from fastapi.routing import APIRoute
from httpx import ASGITransport, AsyncClient

from orthoiq.api import router
from orthoiq.api.endpoints import ALL_ENDPOINTS, get_endpoint, list_endpoints
from orthoiq.core.config import LoggingSettings
from orthoiq.core.exceptions import (
    ConflictError,
    NotFoundError,
    RateLimitedError,
    StorageUnavailableError,
    ValidationError,
    to_http_exception,
)
from orthoiq.core.logger import configure_logging
from orthoiq.middleware.client_cache_middleware import ClientCacheMiddleware


class TestErrorTranslation:
    @pytest.mark.parametrize(
        "error, status",
        [
            (ValidationError("bad tier", field="tier"), 400),
            (NotFoundError("missing"), 404),
            (ConflictError("raced"), 409),
            (StorageUnavailableError("db down"), 503),
        ],
    )
    def test_status_codes(self, error, status):
        http_exc = to_http_exception(error)

        assert http_exc.status_code == status
        assert http_exc.detail["error"] == error.code
        assert http_exc.detail["message"] == error.message
        assert http_exc.headers is None

    def test_rate_limited_has_retry_after(self):
        reset = datetime(2026, 10, 17, tzinfo=UTC)
        error = RateLimitedError("Daily question limit reached", reset_time=reset, remaining=0, total=3)

        http_exc = to_http_exception(error, now=datetime(2026, 10, 16, 23, 0, tzinfo=UTC))

        assert http_exc.status_code == 429
        assert http_exc.headers == {"Retry-After": "3600"}
        assert http_exc.detail == {
            "error": "rate_limited",
            "message": "Daily question limit reached",
            "remaining": 0,
            "total": 3,
            "resetTime": "2026-10-17T00:00:00+00:00",
        }


class TestLogging:
    def test_file_handler_and_quiet_drivers(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging(LoggingSettings(LOG_LEVEL="info", LOG_FILE=str(tmp_path / "orthoiq.log")))

            assert root.level == logging.INFO
            assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
            assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)


class TestClientCacheMiddleware:
    @pytest.mark.asyncio
    async def test_cache_headers(self):
        app = FastAPI()
        app.add_middleware(ClientCacheMiddleware, max_age=30)

        @app.get("/api/v1/health")
        async def health():
            return {"status": "healthy"}

        @app.get("/api/v1/rate-limits/status")
        async def status():
            return {"remaining": 1}

        @app.post("/api/v1/health")
        async def post_health():
            return {}

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            cached = await client.get("/api/v1/health")
            quota = await client.get("/api/v1/rate-limits/status")
            posted = await client.post("/api/v1/health")
            bypass = await client.get("/api/v1/health", headers={"Cache-Control": "no-cache"})

        assert cached.headers["cache-control"] == "public, max-age=30"
        assert quota.headers["cache-control"] == "no-store"
        assert posted.headers["cache-control"] == "no-store"
        assert bypass.headers["cache-control"] == "no-store"


class TestEndpointRegistry:
    def test_every_registered_endpoint_is_routed(self):
        app = FastAPI()
        app.include_router(router)
        routed = {
            (method, route.path) for route in app.routes if isinstance(route, APIRoute) for method in route.methods
        }

        for endpoint in list_endpoints():
            assert (endpoint.method.value, endpoint.path) in routed, endpoint

    def test_lookup(self):
        endpoint = get_endpoint("md_review", "submit")

        assert endpoint.path == "/api/v1/admin/md-review"
        assert get_endpoint("md_review", "nope") is None
        assert len(list_endpoints("questions")) == len(ALL_ENDPOINTS["questions"])

    def test_admin_only(self):
        paths = {endpoint.path for endpoint in list_endpoints(admin_only=True)}

        assert paths == {
            "/api/v1/admin/rate-limits/reset",
            "/api/v1/admin/rate-limits/purge",
            "/api/v1/admin/md-review/queue",
            "/api/v1/admin/md-review/{consultation_id}",
            "/api/v1/admin/md-review",
        }

    def test_admin_paths_are_all_admin_only(self):
        for endpoint in list_endpoints():
            assert endpoint.admin_only == endpoint.path.startswith("/api/v1/admin/"), endpoint

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

# Per-user, per-day state: never cacheable even on GET.
NO_STORE_PATHS = (
    "/api/v1/rate-limits",
    "/api/v1/questions",
    "/api/v1/consultations",
    "/api/v1/admin",
    "/api/v1/feedback",
    "/api/v1/ready",
)


class ClientCacheMiddleware(BaseHTTPMiddleware):
    """Middleware to set the `Cache-Control` header for client-side caching.

    Parameters
    ----------
    app: FastAPI
        The FastAPI application instance.
    max_age: int, optional
        Duration (in seconds) for which cacheable GET responses may be cached. Defaults to 60 seconds.

    Note
    ----
        - Non-GET requests, requests sent with ``no-cache``/``no-store`` and any
        quota, consultation, admin or feedback path get ``no-store``.
        - A ``Cache-Control`` header set by the route itself is left alone.
    """

    def __init__(self, app: FastAPI, max_age: int = 60, no_store_paths: tuple[str, ...] = NO_STORE_PATHS) -> None:
        super().__init__(app)
        self.max_age = max_age
        self.no_store_paths = no_store_paths

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response: Response = await call_next(request)
        path = request.url.path
        request_cache = (request.headers.get("cache-control") or "").lower()

        if request.method != "GET" or "no-store" in request_cache or "no-cache" in request_cache:
            response.headers["Cache-Control"] = "no-store"
            return response

        if any(path.startswith(prefix) for prefix in self.no_store_paths):
            response.headers["Cache-Control"] = "no-store"
            return response

        if "cache-control" not in {key.lower() for key in response.headers.keys()}:
            response.headers["Cache-Control"] = f"public, max-age={self.max_age}"

        return response

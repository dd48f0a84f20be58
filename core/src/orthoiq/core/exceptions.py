"""Domain error kinds.

Every failure the core can report maps onto one of these classes. Routes turn
them into ``HTTPException`` with ``exc.status_code`` and ``exc.to_dict()`` so
callers always get a structured, kind-specific body.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import HTTPException


class OrthoIQError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        payload.update(self.details)
        return payload


class ValidationError(OrthoIQError):
    """Malformed identifier, tier, platform or score. Raised before storage access."""

    status_code = 400
    code = "validation_error"


class ForbiddenError(OrthoIQError):
    status_code = 403
    code = "forbidden"


class NotFoundError(OrthoIQError):
    status_code = 404
    code = "not_found"


class ConflictError(OrthoIQError):
    status_code = 409
    code = "conflict"


class RateLimitedError(OrthoIQError):
    """Daily cap reached. Distinct from validation; carries the reset time."""

    status_code = 429
    code = "rate_limited"

    def __init__(self, message: str, reset_time: datetime, **details: Any):
        super().__init__(message, **details)
        self.reset_time = reset_time

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["resetTime"] = self.reset_time.isoformat()
        return payload

    def retry_after(self, now: datetime) -> int:
        return max(0, int((self.reset_time - now).total_seconds()))


class StorageUnavailableError(OrthoIQError):
    """Database unreachable or timed out. The service fails closed on this."""

    status_code = 503
    code = "storage_unavailable"


def to_http_exception(exc: OrthoIQError, now: datetime | None = None) -> HTTPException:
    """Translate a domain error into the HTTPException a route raises."""
    headers = None
    if isinstance(exc, RateLimitedError):
        now = now or datetime.now(UTC)
        headers = {"Retry-After": str(exc.retry_after(now))}
    return HTTPException(status_code=exc.status_code, detail=exc.to_dict(), headers=headers)

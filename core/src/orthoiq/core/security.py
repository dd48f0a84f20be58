"""Security helpers for admin-only routes."""

import hmac
import logging

from fastapi import Header, HTTPException, status

from .config import settings

LOGGER = logging.getLogger(__name__)


async def verify_admin_key(x_admin_key: str | None = Header(default=None)) -> None:
    """Require the ``x-admin-key`` header to match ``ADMIN_API_KEY``.

    With no key configured every admin call is refused.
    """
    expected = settings.ADMIN_API_KEY
    if not expected or not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        LOGGER.warning("Rejected admin request with missing or invalid x-admin-key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "unauthorized", "message": "Unauthorized"},
        )

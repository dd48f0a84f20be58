"""Client for the orthoiq-agents microservice.

Forwarding is best-effort: local state is committed first, and a failed or
slow agents call is logged and reported to the caller as ``None`` rather
than undoing the local write.
"""

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from ..core.config import settings

LOGGER = logging.getLogger(__name__)


class AgentsServiceClient:
    """Thin async HTTP client with an explicit timeout on every call."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.ORTHOIQ_AGENTS_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.ORTHOIQ_AGENTS_TIMEOUT
        self._transport = transport

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any] | None:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            LOGGER.warning(f"orthoiq-agents unavailable for POST {path}: {e}")
            return None

        if response.status_code >= 400:
            LOGGER.warning(f"orthoiq-agents returned {response.status_code} for POST {path}: {response.text[:500]}")
            return None

        try:
            body = response.json()
        except ValueError:
            LOGGER.warning(f"orthoiq-agents returned a non-JSON body for POST {path}")
            return None
        if not isinstance(body, dict):
            LOGGER.warning(f"orthoiq-agents returned a JSON {type(body).__name__} instead of an object for POST {path}")
            return None
        return body

    async def resolve_md_review(
        self,
        consultation_id: str,
        *,
        approved: bool,
        clinical_accuracy: int,
        feedback_notes: str | None,
    ) -> dict[str, Any] | None:
        """Let the agents service resolve its predictions against the MD verdict."""
        return await self._post(
            "/predictions/resolve/md-review",
            {
                "consultationId": consultation_id,
                "mdReviewData": {
                    "approved": approved,
                    # agents service scores on 0..1
                    "clinicalAccuracy": clinical_accuracy / 5,
                    "recommendations": feedback_notes,
                    "timestamp": datetime.now(UTC).isoformat(),
                },
            },
        )

    async def submit_milestone(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        """Forward milestone feedback; returns the agents' progress analysis."""
        return await self._post("/feedback/milestone", payload)


def get_agents_client() -> AgentsServiceClient:
    """Dependency injection for the agents service client."""
    return AgentsServiceClient()

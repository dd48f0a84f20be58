"""Tests for the best-effort agents service client."""

import json

import httpx
import pytest

from orthoiq.services.agents_client import AgentsServiceClient


def client_for(handler):
    return AgentsServiceClient(base_url="http://agents.test/", timeout=0.5, transport=httpx.MockTransport(handler))


class TestResolveMDReview:
    """POST /predictions/resolve/md-review."""

    @pytest.mark.asyncio
    async def test_accuracy_scaled_to_unit_interval(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"resolved": 3})

        result = await client_for(handler).resolve_md_review(
            "cons-1", approved=True, clinical_accuracy=4, feedback_notes="Good differential"
        )

        assert result == {"resolved": 3}
        assert seen["url"] == "http://agents.test/predictions/resolve/md-review"
        assert seen["body"]["consultationId"] == "cons-1"
        assert seen["body"]["mdReviewData"]["approved"] is True
        assert seen["body"]["mdReviewData"]["clinicalAccuracy"] == pytest.approx(0.8)
        assert seen["body"]["mdReviewData"]["recommendations"] == "Good differential"

    @pytest.mark.asyncio
    async def test_server_error_returns_none(self):
        result = await client_for(lambda request: httpx.Response(502, text="bad gateway")).resolve_md_review(
            "cons-1", approved=True, clinical_accuracy=5, feedback_notes=None
        )
        assert result is None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = await client_for(handler).resolve_md_review(
            "cons-1", approved=False, clinical_accuracy=2, feedback_notes=None
        )
        assert result is None

    @pytest.mark.asyncio
    async def test_non_json_body_returns_none(self):
        result = await client_for(lambda request: httpx.Response(200, text="<html>ok</html>")).submit_milestone(
            {"consultationId": "cons-1"}
        )
        assert result is None

    @pytest.mark.asyncio
    async def test_json_array_body_returns_none(self):
        result = await client_for(lambda request: httpx.Response(200, json=[{"amount": 10}])).submit_milestone(
            {"consultationId": "cons-1"}
        )
        assert result is None


class TestClientDefaults:
    def test_settings_defaults(self):
        client = AgentsServiceClient()
        assert client.base_url == "http://localhost:3000"
        assert client.timeout == 10.0

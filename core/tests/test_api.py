"""HTTP tests for the v1 API."""

import httpx
import pytest

from orthoiq.core.config import settings


def admin_headers():
    return {"x-admin-key": settings.ADMIN_API_KEY}


async def register(client, consultation_id="cons-api", fid="fid:500", **extra):
    payload = {"consultationId": consultation_id, "fid": fid, "specialistCount": 4, "consensusPercentage": 0.85}
    payload.update(extra)
    response = await client.post("/api/v1/consultations", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealthEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.headers["cache-control"] == "public, max-age=60"

    @pytest.mark.asyncio
    async def test_ready(self, client, fake_redis):
        response = await client.get("/api/v1/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["database"] == "healthy"
        assert body["redis"] == "healthy"
        assert response.headers["cache-control"] == "no-store"
        fake_redis.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ready_with_redis_down(self, client, fake_redis):
        fake_redis.ping.side_effect = ConnectionError("redis down")

        response = await client.get("/api/v1/ready")

        assert response.status_code == 503
        assert response.json()["redis"] == "unhealthy"


class TestRateLimitEndpoints:
    @pytest.mark.asyncio
    async def test_status_uses_camel_case(self, client):
        response = await client.get(
            "/api/v1/rate-limits/status", params={"identifier": "fid:501", "tier": "authenticated", "platform": "web"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["allowed"] is True
        assert body["remaining"] == 3
        assert body["total"] == 3
        assert "resetTime" in body
        assert "softWarning" in body
        assert "upgradePrompt" in body

    @pytest.mark.asyncio
    async def test_status_rejects_unknown_tier(self, client):
        response = await client.get("/api/v1/rate-limits/status", params={"identifier": "fid:501", "tier": "gold"})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "validation_error"
        assert response.json()["detail"]["field"] == "tier"

    @pytest.mark.asyncio
    async def test_second_basic_question_is_rate_limited(self, client):
        payload = {"identifier": "anon-api", "tier": "basic", "platform": "web", "question": "Is ice or heat better?"}

        first = await client.post("/api/v1/questions", json=payload)
        second = await client.post("/api/v1/questions", json=payload)

        assert first.status_code == 201
        assert first.json()["rateLimit"]["remaining"] == 0
        assert first.headers["cache-control"] == "no-store"
        assert second.status_code == 429
        detail = second.json()["detail"]
        assert detail["error"] == "rate_limited"
        assert detail["total"] == 1
        assert "resetTime" in detail
        assert int(second.headers["retry-after"]) >= 0

    @pytest.mark.asyncio
    async def test_admin_reset_requires_key(self, client):
        response = await client.post("/api/v1/admin/rate-limits/reset", json={"identifier": "anon-api"})

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_admin_reset_restores_quota(self, client):
        payload = {"identifier": "anon-reset", "tier": "basic", "platform": "web", "question": "Q"}
        await client.post("/api/v1/questions", json=payload)

        reset = await client.post(
            "/api/v1/admin/rate-limits/reset",
            json={"identifier": "anon-reset"},
            headers={"x-admin-key": settings.ADMIN_API_KEY},
        )
        again = await client.post("/api/v1/questions", json=payload)

        assert reset.status_code == 200
        assert reset.json() == {"cleared": "anon-reset", "count": 1}
        assert again.status_code == 201

    @pytest.mark.asyncio
    async def test_admin_purge(self, client):
        response = await client.post(
            "/api/v1/admin/rate-limits/purge", headers={"x-admin-key": settings.ADMIN_API_KEY}
        )

        assert response.status_code == 200
        assert response.json()["purged"] == 0


class TestConsultationEndpoints:
    @pytest.mark.asyncio
    async def test_register_and_duplicate(self, client):
        body = await register(client)

        assert body["tier"] == "standard"
        assert body["mdReviewed"] is False

        duplicate = await client.post("/api/v1/consultations", json={"consultationId": "cons-api", "fid": "fid:500"})
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"]["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_specialist_callback(self, client):
        await register(client, specialistCount=1, consensusPercentage=None)

        response = await client.patch(
            "/api/v1/consultations/cons-api/specialists",
            json={"specialistCount": 5, "consensusPercentage": 0.9, "participatingSpecialists": ["triage"]},
        )

        assert response.status_code == 200
        assert response.json()["specialistCount"] == 5
        assert response.json()["tier"] == "standard"

    @pytest.mark.asyncio
    async def test_privacy_owner_only(self, client):
        await register(client)

        stranger = await client.patch(
            "/api/v1/consultations/cons-api/privacy", json={"fid": "fid:999", "isPrivate": True}
        )
        owner = await client.patch("/api/v1/consultations/cons-api/privacy", json={"fid": "fid:500", "isPrivate": True})
        status = await client.get("/api/v1/consultations/cons-api/privacy")

        assert stranger.status_code == 403
        assert owner.status_code == 200
        assert status.json()["isPrivate"] is True
        assert status.json()["ownerFid"] == "fid:500"

    @pytest.mark.asyncio
    async def test_flag_for_review(self, client):
        await register(client, specialistCount=0, consensusPercentage=None)

        response = await client.patch(
            "/api/v1/consultations/cons-api/flag-for-review", json={"requiresReview": True, "reason": "uncertain"}
        )
        queue = await client.get("/api/v1/admin/md-review/queue", headers=admin_headers())

        assert response.status_code == 200
        assert response.json()["requiresReview"] is True
        assert [item["consultationId"] for item in queue.json()["items"]] == ["cons-api"]

    @pytest.mark.asyncio
    async def test_unknown_consultation(self, client):
        response = await client.get("/api/v1/consultations/nope")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "not_found"


class TestMDReviewEndpoints:
    @pytest.mark.asyncio
    async def test_review_promotes_to_verified(self, client):
        await register(client)

        response = await client.post(
            "/api/v1/admin/md-review",
            json={"consultationId": "cons-api", "approved": True, "clinicalAccuracy": 4, "reviewerId": "dr-a"},
            headers=admin_headers(),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["previousTier"] == "standard"
        assert body["newTier"] == "verified"
        assert body["tierUpgraded"] is True
        assert body["backendPredictionsResolved"] is False

    @pytest.mark.asyncio
    async def test_review_resolves_predictions(self, client, agents_transport):
        agents_transport["transport"] = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))
        await register(client)

        response = await client.post(
            "/api/v1/admin/md-review",
            json={"consultationId": "cons-api", "approved": True, "clinicalAccuracy": 5, "reviewerId": "dr-a"},
            headers=admin_headers(),
        )

        assert response.json()["backendPredictionsResolved"] is True
        assert response.json()["backendResult"] == {"ok": True}

    @pytest.mark.asyncio
    async def test_duplicate_review(self, client):
        await register(client)
        payload = {"consultationId": "cons-api", "approved": True, "clinicalAccuracy": 4, "reviewerId": "dr-a"}

        await client.post("/api/v1/admin/md-review", json=payload, headers=admin_headers())
        again = await client.post("/api/v1/admin/md-review", json=payload, headers=admin_headers())

        assert again.status_code == 200
        assert again.json()["duplicate"] is True
        assert again.json()["newTier"] == "verified"

    @pytest.mark.asyncio
    async def test_review_requires_admin_key(self, client):
        await register(client)
        payload = {"consultationId": "cons-api", "approved": True, "clinicalAccuracy": 5, "reviewerId": "dr-a"}

        anonymous = await client.post("/api/v1/admin/md-review", json=payload)
        wrong_key = await client.post("/api/v1/admin/md-review", json=payload, headers={"x-admin-key": "guess"})
        queue = await client.get("/api/v1/admin/md-review/queue")
        stored = await client.get("/api/v1/consultations/cons-api")

        assert anonymous.status_code == 401
        assert anonymous.json()["detail"]["error"] == "unauthorized"
        assert wrong_key.status_code == 401
        assert queue.status_code == 401
        assert stored.json()["tier"] == "standard"
        assert stored.json()["mdReviewed"] is False

    @pytest.mark.asyncio
    async def test_redelivery_after_later_review(self, client):
        await register(client)
        first = {"consultationId": "cons-api", "approved": True, "clinicalAccuracy": 4, "reviewerId": "dr-a"}
        second = {"consultationId": "cons-api", "approved": False, "clinicalAccuracy": 2, "reviewerId": "dr-b"}

        await client.post("/api/v1/admin/md-review", json=first, headers=admin_headers())
        await client.post("/api/v1/admin/md-review", json=second, headers=admin_headers())
        redelivered = await client.post("/api/v1/admin/md-review", json=first, headers=admin_headers())
        stored = await client.get("/api/v1/consultations/cons-api")

        assert redelivered.status_code == 200
        assert redelivered.json()["duplicate"] is True
        assert redelivered.json()["previousTier"] == "standard"
        assert redelivered.json()["newTier"] == "verified"
        assert stored.json()["tier"] == "verified"

    @pytest.mark.asyncio
    async def test_accuracy_out_of_range(self, client):
        await register(client)

        response = await client.post(
            "/api/v1/admin/md-review",
            json={"consultationId": "cons-api", "approved": True, "clinicalAccuracy": 6, "reviewerId": "dr-a"},
            headers=admin_headers(),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_consultation(self, client):
        response = await client.post(
            "/api/v1/admin/md-review",
            json={"consultationId": "ghost", "approved": True, "clinicalAccuracy": 4, "reviewerId": "dr-a"},
            headers=admin_headers(),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_detail_and_queue(self, client):
        await register(client)

        detail = await client.get("/api/v1/admin/md-review/cons-api", headers=admin_headers())
        queue = await client.get(
            "/api/v1/admin/md-review/queue", params={"filter": "new"}, headers=admin_headers()
        )
        bad_filter = await client.get(
            "/api/v1/admin/md-review/queue", params={"filter": "oldest"}, headers=admin_headers()
        )

        assert detail.status_code == 200
        assert detail.json()["consultation"]["consultationId"] == "cons-api"
        assert detail.json()["milestones"] == []
        assert queue.json()["total"] == 1
        assert bad_filter.status_code == 400


class TestFeedbackEndpoints:
    @pytest.mark.asyncio
    async def test_milestone_saved_while_agents_down(self, client):
        await register(client)

        response = await client.post(
            "/api/v1/feedback/milestone",
            json={
                "consultationId": "cons-api",
                "patientId": "fid:500",
                "milestoneDay": 7,
                "progressData": {"painLevel": 3, "functionalScore": 70, "adherence": 0.9},
                "patientReportedOutcome": {"overallProgress": "improving", "satisfactionSoFar": 8},
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["analyzed"] is False
        assert body["milestone"]["progressStatus"] == "pending_analysis"
        assert body["milestone"]["painLevel"] == 3

    @pytest.mark.asyncio
    async def test_invalid_milestone_day(self, client):
        await register(client)

        response = await client.post(
            "/api/v1/feedback/milestone",
            json={"consultationId": "cons-api", "patientId": "fid:500", "milestoneDay": 9},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "milestoneDay"

    @pytest.mark.asyncio
    async def test_unrecognised_token_reward_counts_as_zero(self, client, agents_transport):
        agents_transport["transport"] = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"progressStatus": "on_track", "tokenReward": "lots"})
        )
        await register(client)

        response = await client.post(
            "/api/v1/feedback/milestone",
            json={"consultationId": "cons-api", "patientId": "fid:500", "milestoneDay": 3},
        )

        assert response.status_code == 200
        assert response.json()["analyzed"] is True
        assert response.json()["milestone"]["tokenReward"] == 0.0
        assert response.json()["milestone"]["progressStatus"] == "on_track"

    @pytest.mark.asyncio
    async def test_non_object_analysis_leaves_milestone_pending(self, client, agents_transport):
        agents_transport["transport"] = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
        await register(client)

        response = await client.post(
            "/api/v1/feedback/milestone",
            json={"consultationId": "cons-api", "patientId": "fid:500", "milestoneDay": 3},
        )

        assert response.status_code == 200
        assert response.json()["analyzed"] is False
        assert response.json()["milestone"]["progressStatus"] == "pending_analysis"

"""Tests for question submission against the daily cap."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from orthoiq.core.exceptions import RateLimitedError, StorageUnavailableError, ValidationError
from orthoiq.crud.crud_question import crud_questions
from orthoiq.crud.crud_rate_limit import crud_rate_limits
from orthoiq.models.question import Question
from orthoiq.services.question_service import MAX_QUESTION_LENGTH, QuestionService
from orthoiq.services.rate_limit_service import RateLimitEvaluator, window_for


async def question_count(db):
    return await db.scalar(select(func.count()).select_from(Question))


class TestQuestionService:
    @pytest.mark.asyncio
    async def test_accepted_question_is_recorded(self, db, clock):
        service = QuestionService(RateLimitEvaluator(db, clock=clock))

        submitted = await service.submit(
            identifier="fid:300",
            tier="authenticated",
            platform="miniapp",
            mode="normal",
            question="Sharp knee pain when climbing stairs?",
        )

        assert submitted.question.id is not None
        assert submitted.question.mode == "normal"
        assert submitted.decision.remaining == 2
        assert await question_count(db) == 1

    @pytest.mark.asyncio
    async def test_capped_user_gets_rate_limited(self, db, clock):
        service = QuestionService(RateLimitEvaluator(db, clock=clock))
        await service.submit(identifier="anon-1", tier="basic", platform="web", mode="fast", question="Q1")

        with pytest.raises(RateLimitedError) as exc_info:
            await service.submit(identifier="anon-1", tier="basic", platform="web", mode="fast", question="Q2")

        error = exc_info.value
        assert error.reset_time == datetime(2026, 10, 17, tzinfo=UTC)
        assert error.to_dict()["error"] == "rate_limited"
        assert error.to_dict()["resetTime"] == "2026-10-17T00:00:00+00:00"
        assert error.details["upgradePrompt"] == "Sign in to unlock more questions per day!"
        assert await question_count(db) == 1

    @pytest.mark.parametrize("text", ["", "   ", "x" * (MAX_QUESTION_LENGTH + 1)])
    @pytest.mark.asyncio
    async def test_bad_question_consumes_nothing(self, db, clock, text):
        service = QuestionService(RateLimitEvaluator(db, clock=clock))

        with pytest.raises(ValidationError):
            await service.submit(identifier="fid:301", tier="basic", platform="web", mode="fast", question=text)

        assert await crud_rate_limits.get(db, "fid:301", "web", window_for(clock())) is None

    @pytest.mark.asyncio
    async def test_failed_insert_rolls_back_slot(self, db, clock):
        service = QuestionService(RateLimitEvaluator(db, clock=clock))

        with patch.object(crud_questions, "create", AsyncMock(side_effect=OSError("disk I/O error"))):
            with pytest.raises(StorageUnavailableError):
                await service.submit(identifier="fid:302", tier="basic", platform="web", mode="fast", question="Q")

        assert await crud_rate_limits.get(db, "fid:302", "web", window_for(clock())) is None

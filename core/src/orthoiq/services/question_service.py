"""Question submission: the only place a rate-limit slot is consumed."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import RateLimitedError, StorageUnavailableError, ValidationError
from ..crud.crud_question import crud_questions
from ..models.question import Question
from ..models.tier import ConsultationMode, Platform, UserTier
from .rate_limit_service import RateLimitDecision, RateLimitEvaluator

LOGGER = logging.getLogger(__name__)

MAX_QUESTION_LENGTH = 4000

STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


@dataclass
class SubmittedQuestion:
    question: Question
    decision: RateLimitDecision


class QuestionService:
    def __init__(self, evaluator: RateLimitEvaluator):
        self.evaluator = evaluator
        self.db = evaluator.db

    async def submit(
        self,
        *,
        identifier: str,
        tier: UserTier | str,
        platform: Platform | str,
        mode: ConsultationMode | str,
        question: str,
    ) -> SubmittedQuestion:
        """Consume one daily slot and log the question in the same transaction.

        Raises RateLimitedError when the cap is reached; nothing is written then.
        """
        text = (question or "").strip()
        if not text:
            raise ValidationError("question is required", field="question")
        if len(text) > MAX_QUESTION_LENGTH:
            raise ValidationError(f"question must be at most {MAX_QUESTION_LENGTH} characters", field="question")

        decision = await self.evaluator.consume(identifier, tier, platform, mode, commit=False)
        if not decision.allowed:
            await self.db.rollback()
            raise RateLimitedError(
                decision.soft_warning or "Daily question limit reached",
                reset_time=decision.reset_time,
                remaining=0,
                total=decision.total,
                upgradePrompt=decision.upgrade_prompt,
            )

        try:
            db_question = await crud_questions.create(
                self.db,
                identifier=identifier.strip(),
                platform=decision.platform.value,
                mode=ConsultationMode(mode).value,
                question=text,
            )
            await self.db.commit()
        except STORAGE_ERRORS as e:
            await self.db.rollback()
            LOGGER.error(f"Failed to record question for {identifier}: {e}")
            raise StorageUnavailableError("Question store is unavailable") from e

        return SubmittedQuestion(question=db_question, decision=decision)

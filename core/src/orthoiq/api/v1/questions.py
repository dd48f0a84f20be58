"""Question intake. Each accepted question consumes one daily slot."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions import OrthoIQError, to_http_exception
from ...schemas.question import QuestionAccepted, QuestionCreate
from ...schemas.rate_limit import RateLimitStatus
from ...services.question_service import QuestionService
from ...services.rate_limit_service import RateLimitEvaluator

router = APIRouter(prefix="/questions", tags=["Questions"])


async def get_question_service(db: Annotated[AsyncSession, Depends(async_get_db)]) -> QuestionService:
    return QuestionService(RateLimitEvaluator(db))


@router.post(
    "",
    response_model=QuestionAccepted,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Question",
    description="Consume one daily slot for the identifier and record the question",
)
async def submit_question(
    payload: QuestionCreate,
    service: Annotated[QuestionService, Depends(get_question_service)],
):
    try:
        submitted = await service.submit(
            identifier=payload.identifier,
            tier=payload.tier,
            platform=payload.platform,
            mode=payload.mode,
            question=payload.question,
        )
    except OrthoIQError as e:
        raise to_http_exception(e) from e

    return QuestionAccepted(
        question_id=submitted.question.id,
        rate_limit=RateLimitStatus.model_validate(submitted.decision),
    )

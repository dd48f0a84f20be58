"""Daily question quota status."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions import OrthoIQError, to_http_exception
from ...schemas.rate_limit import RateLimitStatus
from ...services.rate_limit_service import RateLimitEvaluator

router = APIRouter(prefix="/rate-limits", tags=["Rate Limits"])


async def get_rate_limit_evaluator(db: Annotated[AsyncSession, Depends(async_get_db)]) -> RateLimitEvaluator:
    return RateLimitEvaluator(db)


@router.get(
    "/status",
    response_model=RateLimitStatus,
    response_model_by_alias=True,
    summary="Rate Limit Status",
    description="Remaining questions for today without consuming one",
)
async def get_rate_limit_status(
    evaluator: Annotated[RateLimitEvaluator, Depends(get_rate_limit_evaluator)],
    identifier: str = Query(..., description="User fid, email or client identifier"),
    tier: str = Query("basic", description="basic, authenticated or medical"),
    platform: str = Query("web", description="miniapp or web"),
):
    try:
        decision = await evaluator.evaluate(identifier, tier, platform)
    except OrthoIQError as e:
        raise to_http_exception(e) from e
    return RateLimitStatus.model_validate(decision)

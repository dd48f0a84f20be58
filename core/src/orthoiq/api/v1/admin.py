"""Admin rate limit maintenance. Requires the ``x-admin-key`` header."""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query

from ...core.exceptions import OrthoIQError, to_http_exception
from ...core.security import verify_admin_key
from ...schemas.rate_limit import RateLimitPurgeResponse, RateLimitResetRequest, RateLimitResetResponse
from ...services.rate_limit_service import RateLimitEvaluator, window_for
from .rate_limits import get_rate_limit_evaluator

router = APIRouter(
    prefix="/admin/rate-limits",
    tags=["Admin"],
    dependencies=[Depends(verify_admin_key)],
)


@router.post("/reset", response_model=RateLimitResetResponse, summary="Reset Rate Limits")
async def reset_rate_limits(
    evaluator: Annotated[RateLimitEvaluator, Depends(get_rate_limit_evaluator)],
    payload: Annotated[RateLimitResetRequest | None, Body()] = None,
):
    payload = payload or RateLimitResetRequest()
    try:
        removed = await evaluator.reset(identifier=payload.identifier, platform=payload.platform)
    except OrthoIQError as e:
        raise to_http_exception(e) from e
    return RateLimitResetResponse(cleared=payload.identifier or "all", count=removed)


@router.post("/purge", response_model=RateLimitPurgeResponse, summary="Purge Expired Rate Limits")
async def purge_expired_rate_limits(
    evaluator: Annotated[RateLimitEvaluator, Depends(get_rate_limit_evaluator)],
    days: int = Query(0, ge=0, le=365, description="Keep this many past days besides today"),
):
    cutoff = window_for(evaluator.clock()) - timedelta(days=days)
    try:
        removed = await evaluator.purge_expired(before=cutoff)
    except OrthoIQError as e:
        raise to_http_exception(e) from e
    return RateLimitPurgeResponse(purged=removed, before=cutoff.isoformat())

"""Admin MD review: queue, detail and review submission. Requires the ``x-admin-key`` header."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions import OrthoIQError, to_http_exception
from ...core.security import verify_admin_key
from ...schemas.consultation import ConsultationRead
from ...schemas.md_review import MDReviewResult, MDReviewSubmit, ReviewDetail, ReviewQueue, ReviewQueueItem
from ...schemas.milestone import MilestoneRead
from ...services.agents_client import AgentsServiceClient, get_agents_client
from ...services.consultation_service import ConsultationService
from ...services.tier_promotion import ReviewEvent, TierPromotionService

router = APIRouter(
    prefix="/admin/md-review",
    tags=["MD Review"],
    dependencies=[Depends(verify_admin_key)],
)

LOGGER = logging.getLogger(__name__)


async def get_promotion_service(db: Annotated[AsyncSession, Depends(async_get_db)]) -> TierPromotionService:
    return TierPromotionService(db)


async def get_consultation_service(db: Annotated[AsyncSession, Depends(async_get_db)]) -> ConsultationService:
    return ConsultationService(db)


@router.get("/queue", response_model=ReviewQueue, summary="MD Review Queue")
async def get_review_queue(
    service: Annotated[ConsultationService, Depends(get_consultation_service)],
    filter: str = Query("all", description="all, urgent, high-consensus or new"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    try:
        items, total = await service.review_queue(filter, limit=limit, offset=offset)
    except OrthoIQError as e:
        raise to_http_exception(e) from e

    return ReviewQueue(
        items=[ReviewQueueItem.model_validate(item) for item in items],
        total=total,
        filter=filter,
        limit=limit,
        offset=offset,
    )


@router.get("/{consultation_id}", response_model=ReviewDetail, summary="MD Review Detail")
async def get_review_detail(
    consultation_id: str,
    service: Annotated[ConsultationService, Depends(get_consultation_service)],
):
    try:
        consultation, milestones = await service.review_detail(consultation_id)
    except OrthoIQError as e:
        raise to_http_exception(e) from e

    return ReviewDetail(
        consultation=ConsultationRead.model_validate(consultation),
        milestones=[MilestoneRead.model_validate(m) for m in milestones],
    )


@router.post(
    "",
    response_model=MDReviewResult,
    summary="Submit MD Review",
    description="Record a physician review and advance the consultation tier",
)
async def submit_md_review(
    payload: MDReviewSubmit,
    service: Annotated[TierPromotionService, Depends(get_promotion_service)],
    agents: Annotated[AgentsServiceClient, Depends(get_agents_client)],
):
    event = ReviewEvent(
        reviewer_id=payload.reviewer_id,
        approved=payload.approved,
        clinical_accuracy=payload.clinical_accuracy,
        feedback_notes=payload.feedback_notes,
        review_id=payload.review_id,
    )
    try:
        result = await service.promote(payload.consultation_id, event)
    except OrthoIQError as e:
        raise to_http_exception(e) from e

    backend_result = None
    if not result.duplicate:
        backend_result = await agents.resolve_md_review(
            payload.consultation_id,
            approved=payload.approved,
            clinical_accuracy=payload.clinical_accuracy,
            feedback_notes=payload.feedback_notes,
        )

    if result.duplicate:
        message = "Review already recorded"
    elif backend_result is not None:
        message = "MD review submitted and predictions resolved"
    else:
        message = "MD review submitted (prediction resolution pending)"

    return MDReviewResult(
        consultation_id=payload.consultation_id,
        approved=payload.approved,
        clinical_accuracy=payload.clinical_accuracy,
        previous_tier=result.previous_tier,
        new_tier=result.new_tier,
        tier_upgraded=result.tier_upgraded,
        duplicate=result.duplicate,
        backend_predictions_resolved=backend_result is not None,
        backend_result=backend_result,
        message=message,
        timestamp=datetime.now(UTC),
    )

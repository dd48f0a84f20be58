"""MD review schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from ..core.schemas import CamelModel
from ..models.tier import ConsultationTier
from .consultation import ConsultationRead
from .milestone import MilestoneRead


class MDReviewSubmit(CamelModel):
    consultation_id: str = Field(..., min_length=1, max_length=255)
    approved: bool
    clinical_accuracy: int = Field(..., ge=1, le=5)
    feedback_notes: Optional[str] = None
    reviewer_id: str = Field(..., min_length=1, max_length=255)
    review_id: Optional[str] = Field(None, max_length=100)


class MDReviewResult(CamelModel):
    success: bool = True
    consultation_id: str
    approved: bool
    clinical_accuracy: int
    previous_tier: ConsultationTier
    new_tier: ConsultationTier
    tier_upgraded: bool
    duplicate: bool = False
    backend_predictions_resolved: bool = False
    backend_result: Optional[dict[str, Any]] = None
    message: str
    timestamp: datetime


class ReviewQueueItem(CamelModel):
    consultation_id: str
    fid: str
    mode: str
    specialist_count: int
    consensus_percentage: Optional[float] = None
    coordination_summary: Optional[str] = None
    tier: ConsultationTier
    requires_md_review: bool
    created_at: datetime


class ReviewQueue(CamelModel):
    items: list[ReviewQueueItem]
    total: int
    filter: str
    limit: int
    offset: int


class ReviewDetail(CamelModel):
    consultation: ConsultationRead
    milestones: list[MilestoneRead]

"""Question submission schemas."""

from pydantic import Field

from ..core.schemas import CamelModel
from ..models.tier import ConsultationMode, Platform, UserTier
from .rate_limit import RateLimitStatus


class QuestionCreate(CamelModel):
    identifier: str = Field(..., min_length=1, max_length=255)
    tier: UserTier = UserTier.BASIC
    platform: Platform = Platform.WEB
    mode: ConsultationMode = ConsultationMode.FAST
    question: str = Field(..., min_length=1)


class QuestionAccepted(CamelModel):
    question_id: int
    rate_limit: RateLimitStatus

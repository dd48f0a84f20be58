"""Services for rate limiting, MD review tiers and consultation feedback."""

from .agents_client import AgentsServiceClient
from .consultation_service import ConsultationService
from .milestone_service import MilestoneService, MilestoneSubmission
from .question_service import QuestionService
from .rate_limit_service import RateLimitDecision, RateLimitEvaluator
from .tier_promotion import PromotionResult, ReviewEvent, TierPromotionService, next_tier

__all__ = [
    "AgentsServiceClient",
    "ConsultationService",
    "MilestoneService",
    "MilestoneSubmission",
    "QuestionService",
    "RateLimitDecision",
    "RateLimitEvaluator",
    "PromotionResult",
    "ReviewEvent",
    "TierPromotionService",
    "next_tier",
]

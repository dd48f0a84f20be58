"""ORM models; imported here so ``Base.metadata`` sees every table."""

from .consultation import Consultation
from .md_review_event import MDReviewEvent
from .milestone import MilestoneFeedback
from .question import Question
from .rate_limit import RateLimit

__all__ = ["Consultation", "MDReviewEvent", "MilestoneFeedback", "Question", "RateLimit"]

"""CRUD module init."""

from .crud_consultation import crud_consultations
from .crud_md_review_event import crud_md_review_events
from .crud_milestone import crud_milestones
from .crud_question import crud_questions
from .crud_rate_limit import crud_rate_limits

__all__ = ["crud_consultations", "crud_md_review_events", "crud_milestones", "crud_questions", "crud_rate_limits"]

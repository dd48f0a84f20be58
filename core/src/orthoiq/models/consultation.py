"""Consultation record with its MD review audit trail."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from ..core.db.database import Base
from .tier import ConsultationMode, ConsultationTier


class Consultation(Base):
    """A multi-specialist consultation and the state of its MD review.

    ``tier`` and every ``md_*`` column are written by one statement when a
    review is applied; see ``crud_consultation.apply_review``.
    """

    __tablename__ = "consultations"

    consultation_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    fid: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    question_id: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    mode: Mapped[str] = mapped_column(String(20), default=ConsultationMode.FAST.value)

    # Specialist agents
    specialist_count: Mapped[int] = mapped_column(Integer, default=0)
    consensus_percentage: Mapped[Optional[float]] = mapped_column(Float, default=None)
    participating_specialists: Mapped[Optional[list]] = mapped_column(JSON, default=None)
    coordination_summary: Mapped[Optional[str]] = mapped_column(Text, default=None)

    tier: Mapped[str] = mapped_column(String(20), index=True, default=ConsultationTier.STANDARD.value)

    # MD review
    requires_md_review: Mapped[bool] = mapped_column(Boolean, default=False)
    md_reviewed: Mapped[bool] = mapped_column(Boolean, index=True, default=False)
    md_approved: Mapped[Optional[bool]] = mapped_column(Boolean, default=None)
    md_clinical_accuracy: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    md_reviewer_id: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    md_feedback_notes: Mapped[Optional[str]] = mapped_column(Text, default=None)
    md_reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=None)
    md_review_key: Mapped[Optional[str]] = mapped_column(String(128), default=None)

    is_private: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True, nullable=False, init=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, init=False
    )

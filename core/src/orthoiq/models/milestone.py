"""Milestone feedback model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from ..core.db.database import Base


class MilestoneFeedback(Base):
    """Patient-reported progress at a recovery milestone day.

    One row per (consultation, day); a re-submission updates the row.
    """

    __tablename__ = "feedback_milestones"
    __table_args__ = (
        UniqueConstraint("consultation_id", "milestone_day", name="uq_feedback_milestones_consultation_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, init=False)
    milestone_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    consultation_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("consultations.consultation_id", ondelete="CASCADE"), index=True, nullable=False
    )
    patient_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    milestone_day: Mapped[int] = mapped_column(Integer, nullable=False)

    # Patient-reported metrics
    pain_level: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    functional_score: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    adherence: Mapped[Optional[float]] = mapped_column(Float, default=None)
    overall_progress: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    satisfaction_so_far: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    difficulties_encountered: Mapped[Optional[str]] = mapped_column(Text, default=None)
    concern_flags: Mapped[Optional[list]] = mapped_column(JSON, default=None)

    # Validation outcome from the agents service
    milestone_achieved: Mapped[Optional[bool]] = mapped_column(Boolean, default=None)
    progress_status: Mapped[str] = mapped_column(String(50), default="pending_analysis")
    token_reward: Mapped[float] = mapped_column(Float, default=0.0)
    next_milestone_day: Mapped[Optional[int]] = mapped_column(Integer, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, init=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, init=False
    )

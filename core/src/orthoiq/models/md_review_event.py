"""Applied MD review events, one row per distinct review of a consultation."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from ..core.db.database import Base


class MDReviewEvent(Base):
    """Outcome recorded when a review event was applied.

    ``review_key`` is the event fingerprint; a redelivered event finds its row
    here and gets back the tiers it originally produced.
    """

    __tablename__ = "md_review_events"
    __table_args__ = (
        UniqueConstraint("consultation_id", "review_key", name="uq_md_review_events_consultation_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, init=False)
    consultation_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("consultations.consultation_id", ondelete="CASCADE"), index=True, nullable=False
    )
    review_key: Mapped[str] = mapped_column(String(128), nullable=False)
    reviewer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False)
    clinical_accuracy: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_tier: Mapped[str] = mapped_column(String(20), nullable=False)
    new_tier: Mapped[str] = mapped_column(String(20), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, init=False
    )

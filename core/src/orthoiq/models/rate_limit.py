"""Daily question counter model."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from ..core.db.database import Base


class RateLimit(Base):
    """One counter row per (identifier, platform, UTC day).

    A new day gets a new row, so yesterday's count can never leak into today.
    """

    __tablename__ = "rate_limits"
    __table_args__ = (
        UniqueConstraint("identifier", "platform", "window_start", name="uq_rate_limits_identifier_platform_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, init=False)
    identifier: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    platform: Mapped[str] = mapped_column(String(20), nullable=False)
    window_start: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    tier: Mapped[str] = mapped_column(String(20), nullable=False)
    mode: Mapped[str] = mapped_column(String(20), nullable=False, default="fast")
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, init=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, init=False
    )

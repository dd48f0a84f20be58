"""CRUD operations for consultations and their MD review state."""

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.consultation import Consultation
from ..models.tier import ConsultationMode

URGENT_AFTER = timedelta(days=3)
NEW_WITHIN = timedelta(days=1)

QUEUE_FILTERS = ("all", "urgent", "high-consensus", "new")


class CRUDConsultation:
    async def get(self, db: AsyncSession, consultation_id: str) -> Consultation | None:
        """Load a consultation, always refreshing from the database."""
        result = await db.execute(
            select(Consultation)
            .where(Consultation.consultation_id == consultation_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, consultation: Consultation) -> Consultation:
        db.add(consultation)
        await db.flush()
        return consultation

    async def update_fields(self, db: AsyncSession, consultation_id: str, **values: Any) -> bool:
        """Plain field update. Returns False when no such consultation exists."""
        result = await db.execute(
            update(Consultation)
            .where(Consultation.consultation_id == consultation_id)
            .values(**values)
            .returning(Consultation.consultation_id)
            .execution_options(synchronize_session=False)
        )
        return result.first() is not None

    async def apply_review(
        self,
        db: AsyncSession,
        consultation_id: str,
        *,
        expected_tier: str,
        expected_review_key: str | None,
        values: dict[str, Any],
    ) -> bool:
        """Compare-and-swap write of tier plus review audit fields.

        The row is only touched if its tier and last review key are still the
        ones the caller read. Returns False when another writer got there first.
        """
        result = await db.execute(
            update(Consultation)
            .where(
                Consultation.consultation_id == consultation_id,
                Consultation.tier == expected_tier,
                Consultation.md_review_key.is_not_distinct_from(expected_review_key),
            )
            .values(**values)
            .returning(Consultation.consultation_id)
            .execution_options(synchronize_session=False)
        )
        return result.first() is not None

    async def list_review_queue(
        self,
        db: AsyncSession,
        *,
        now: datetime,
        queue_filter: str = "all",
        limit: int = 50,
        offset: int = 0,
        specialist_threshold: int = 4,
    ) -> list[Consultation]:
        """Unreviewed consultations eligible for MD review, urgent cases first."""
        urgent_cutoff = now - URGENT_AFTER
        query = select(Consultation).where(
            Consultation.md_reviewed.is_(False),
            or_(
                Consultation.specialist_count >= specialist_threshold,
                Consultation.mode == ConsultationMode.NORMAL.value,
                Consultation.requires_md_review.is_(True),
            ),
        )

        if queue_filter == "urgent":
            query = query.where(Consultation.created_at < urgent_cutoff)
        elif queue_filter == "high-consensus":
            query = query.where(
                or_(Consultation.consensus_percentage >= 0.90, Consultation.specialist_count == 5)
            )
        elif queue_filter == "new":
            query = query.where(Consultation.created_at >= now - NEW_WITHIN)

        query = query.order_by(
            case((Consultation.created_at < urgent_cutoff, 0), else_=1),
            Consultation.specialist_count.desc(),
            Consultation.created_at.desc(),
        ).offset(offset).limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())

    async def count_pending_reviews(self, db: AsyncSession, specialist_threshold: int = 4) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Consultation)
            .where(
                and_(
                    Consultation.md_reviewed.is_(False),
                    or_(
                        Consultation.specialist_count >= specialist_threshold,
                        Consultation.mode == ConsultationMode.NORMAL.value,
                        Consultation.requires_md_review.is_(True),
                    ),
                )
            )
        )
        return result.scalar_one()


crud_consultations = CRUDConsultation()

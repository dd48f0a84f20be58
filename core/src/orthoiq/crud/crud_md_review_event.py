"""CRUD operations for applied MD review events."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.md_review_event import MDReviewEvent


class CRUDMDReviewEvent:
    async def get(self, db: AsyncSession, consultation_id: str, review_key: str) -> MDReviewEvent | None:
        result = await db.execute(
            select(MDReviewEvent).where(
                MDReviewEvent.consultation_id == consultation_id,
                MDReviewEvent.review_key == review_key,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, event: MDReviewEvent) -> MDReviewEvent:
        """Flush immediately so a duplicate key surfaces as IntegrityError here."""
        db.add(event)
        await db.flush()
        return event


crud_md_review_events = CRUDMDReviewEvent()

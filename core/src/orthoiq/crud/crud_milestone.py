"""CRUD operations for milestone feedback."""

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.milestone import MilestoneFeedback
from .dialect import upsert_insert

# Columns a re-submission for the same day overwrites
PATIENT_REPORTED_FIELDS = (
    "patient_id",
    "pain_level",
    "functional_score",
    "adherence",
    "overall_progress",
    "satisfaction_so_far",
    "difficulties_encountered",
    "concern_flags",
)

# Analysis from an earlier submission no longer describes the new metrics
ANALYSIS_RESET = {
    "milestone_achieved": None,
    "progress_status": "pending_analysis",
    "token_reward": 0.0,
    "next_milestone_day": None,
}


class CRUDMilestone:
    async def upsert_for_day(self, db: AsyncSession, values: dict[str, Any]) -> MilestoneFeedback:
        """Store feedback for (consultation, day), updating the existing row if present."""
        insert = upsert_insert(db, MilestoneFeedback)
        stmt = insert.values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[MilestoneFeedback.consultation_id, MilestoneFeedback.milestone_day],
            set_={
                **{name: getattr(stmt.excluded, name) for name in PATIENT_REPORTED_FIELDS},
                **ANALYSIS_RESET,
                "updated_at": func.now(),
            },
        )
        await db.execute(stmt)
        return await self.get_for_day(db, values["consultation_id"], values["milestone_day"])

    async def get_for_day(self, db: AsyncSession, consultation_id: str, milestone_day: int) -> MilestoneFeedback | None:
        result = await db.execute(
            select(MilestoneFeedback)
            .where(
                MilestoneFeedback.consultation_id == consultation_id,
                MilestoneFeedback.milestone_day == milestone_day,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_consultation(self, db: AsyncSession, consultation_id: str) -> list[MilestoneFeedback]:
        result = await db.execute(
            select(MilestoneFeedback)
            .where(MilestoneFeedback.consultation_id == consultation_id)
            .order_by(MilestoneFeedback.milestone_day.asc())
        )
        return list(result.scalars().all())

    async def update_analysis(self, db: AsyncSession, milestone_pk: int, **analysis: Any) -> None:
        await db.execute(
            update(MilestoneFeedback)
            .where(MilestoneFeedback.id == milestone_pk)
            .values(**analysis)
            .execution_options(synchronize_session=False)
        )


crud_milestones = CRUDMilestone()

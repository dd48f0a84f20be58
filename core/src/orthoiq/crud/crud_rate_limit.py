"""CRUD operations for daily rate-limit counters."""

from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.rate_limit import RateLimit
from .dialect import upsert_insert


class CRUDRateLimit:
    """Counter rows keyed by (identifier, platform, window_start)."""

    async def get(self, db: AsyncSession, identifier: str, platform: str, window_start: date) -> RateLimit | None:
        result = await db.execute(
            select(RateLimit).where(
                RateLimit.identifier == identifier,
                RateLimit.platform == platform,
                RateLimit.window_start == window_start,
            )
        )
        return result.scalar_one_or_none()

    async def increment_if_below(
        self,
        db: AsyncSession,
        *,
        identifier: str,
        platform: str,
        window_start: date,
        tier: str,
        mode: str,
        cap: int,
    ) -> int | None:
        """Atomically add one to today's counter unless it already reached ``cap``.

        Single statement: INSERT ... ON CONFLICT DO UPDATE ... WHERE count < cap
        RETURNING count. Returns the new count, or None when the cap was hit and
        nothing was written.
        """
        insert = upsert_insert(db, RateLimit)
        stmt = insert.values(
            identifier=identifier,
            platform=platform,
            window_start=window_start,
            tier=tier,
            mode=mode,
            count=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[RateLimit.identifier, RateLimit.platform, RateLimit.window_start],
            set_={
                "count": RateLimit.count + 1,
                "tier": stmt.excluded.tier,
                "mode": stmt.excluded.mode,
                "updated_at": func.now(),
            },
            where=RateLimit.count < cap,
        ).returning(RateLimit.count)

        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def delete(
        self,
        db: AsyncSession,
        identifier: str | None = None,
        platform: str | None = None,
    ) -> int:
        """Delete counters for one identifier (optionally one platform), or all of them."""
        stmt = delete(RateLimit)
        if identifier is not None:
            stmt = stmt.where(RateLimit.identifier == identifier)
        if platform is not None:
            stmt = stmt.where(RateLimit.platform == platform)
        result = await db.execute(stmt)
        return result.rowcount or 0

    async def delete_before(self, db: AsyncSession, window_start: date) -> int:
        result = await db.execute(delete(RateLimit).where(RateLimit.window_start < window_start))
        return result.rowcount or 0


crud_rate_limits = CRUDRateLimit()

"""Consultation lifecycle outside of MD review: registration, specialist
callbacks, review flag, owner privacy and the review queue."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from ..crud.crud_consultation import QUEUE_FILTERS, crud_consultations
from ..crud.crud_milestone import crud_milestones
from ..models.consultation import Consultation
from ..models.milestone import MilestoneFeedback
from ..models.tier import ConsultationMode, ConsultationTier

LOGGER = logging.getLogger(__name__)

STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


class ConsultationService:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = lambda: datetime.now(UTC)):
        self.db = db
        self.clock = clock

    async def get(self, consultation_id: str) -> Consultation:
        try:
            consultation = await crud_consultations.get(self.db, consultation_id)
        except STORAGE_ERRORS as e:
            raise StorageUnavailableError("Consultation store is unavailable") from e
        if consultation is None:
            raise NotFoundError("Consultation not found", consultationId=consultation_id)
        return consultation

    async def create(
        self,
        *,
        consultation_id: str,
        fid: str,
        mode: ConsultationMode = ConsultationMode.FAST,
        question_id: int | None = None,
        specialist_count: int = 0,
        consensus_percentage: float | None = None,
        participating_specialists: list[str] | None = None,
        coordination_summary: str | None = None,
    ) -> Consultation:
        """Register a consultation produced by the agents pipeline. Starts at standard."""
        _check_consensus(consensus_percentage)
        consultation = Consultation(
            consultation_id=consultation_id,
            fid=fid,
            question_id=question_id,
            mode=mode.value,
            specialist_count=specialist_count,
            consensus_percentage=consensus_percentage,
            participating_specialists=participating_specialists,
            coordination_summary=coordination_summary,
            tier=ConsultationTier.STANDARD.value,
        )
        try:
            await crud_consultations.create(self.db, consultation)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("Consultation already exists", consultationId=consultation_id) from e
        except STORAGE_ERRORS as e:
            await self.db.rollback()
            raise StorageUnavailableError("Consultation store is unavailable") from e

        LOGGER.info(f"Registered consultation {consultation_id} for fid {fid}")
        return await self.get(consultation_id)

    async def record_specialist_consensus(
        self,
        consultation_id: str,
        *,
        specialist_count: int,
        consensus_percentage: float | None,
        participating_specialists: list[str] | None = None,
        coordination_summary: str | None = None,
    ) -> Consultation:
        """Specialist-agent callback. Touches the specialist fields only, never the tier."""
        _check_consensus(consensus_percentage)
        values: dict[str, Any] = {
            "specialist_count": specialist_count,
            "consensus_percentage": consensus_percentage,
        }
        if participating_specialists is not None:
            values["participating_specialists"] = participating_specialists
        if coordination_summary is not None:
            values["coordination_summary"] = coordination_summary

        await self._update(consultation_id, values)
        LOGGER.info(
            f"Specialist consensus for {consultation_id}: "
            f"{specialist_count} specialists, consensus={consensus_percentage}"
        )
        return await self.get(consultation_id)

    async def flag_for_review(
        self,
        consultation_id: str,
        requires_review: bool,
        reason: str | None = None,
        quality_score: float | None = None,
    ) -> None:
        await self._update(consultation_id, {"requires_md_review": requires_review})
        LOGGER.info(
            f"Consultation {consultation_id} flagged for MD review: {requires_review} "
            f"(reason={reason}, quality_score={quality_score})"
        )

    async def set_privacy(self, consultation_id: str, fid: str, is_private: bool) -> None:
        """Only the owning user may change a consultation's visibility."""
        consultation = await self.get(consultation_id)
        if consultation.fid != fid:
            raise ForbiddenError(
                "Only the consultation owner can change privacy settings",
                consultationId=consultation_id,
            )
        await self._update(consultation_id, {"is_private": is_private})

    async def review_queue(
        self, queue_filter: str = "all", limit: int = 50, offset: int = 0
    ) -> tuple[list[Consultation], int]:
        if queue_filter not in QUEUE_FILTERS:
            raise ValidationError(f"filter must be one of: {', '.join(QUEUE_FILTERS)}", field="filter")
        try:
            items = await crud_consultations.list_review_queue(
                self.db,
                now=self.clock(),
                queue_filter=queue_filter,
                limit=limit,
                offset=offset,
                specialist_threshold=settings.TIER_SPECIALIST_THRESHOLD,
            )
            total = await crud_consultations.count_pending_reviews(self.db, settings.TIER_SPECIALIST_THRESHOLD)
        except STORAGE_ERRORS as e:
            raise StorageUnavailableError("Consultation store is unavailable") from e
        return items, total

    async def review_detail(self, consultation_id: str) -> tuple[Consultation, list[MilestoneFeedback]]:
        consultation = await self.get(consultation_id)
        try:
            milestones = await crud_milestones.list_for_consultation(self.db, consultation_id)
        except STORAGE_ERRORS as e:
            raise StorageUnavailableError("Consultation store is unavailable") from e
        return consultation, milestones

    async def _update(self, consultation_id: str, values: dict[str, Any]) -> None:
        try:
            found = await crud_consultations.update_fields(self.db, consultation_id, **values)
            if not found:
                await self.db.rollback()
                raise NotFoundError("Consultation not found", consultationId=consultation_id)
            await self.db.commit()
        except STORAGE_ERRORS as e:
            await self.db.rollback()
            raise StorageUnavailableError("Consultation store is unavailable") from e


def _check_consensus(consensus_percentage: float | None) -> None:
    if consensus_percentage is not None and not 0.0 <= consensus_percentage <= 1.0:
        raise ValidationError("consensusPercentage must be between 0 and 1", field="consensusPercentage")

"""MD review tier promotion.

A consultation moves forward along standard -> complete -> verified ->
exceptional as specialists agree and a physician signs off. The tier never
moves backwards, a rejected review never changes it, and re-delivering the
same review event is a no-op that reports the originally recorded outcome.
"""

import hashlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import TierPromotionSettings, settings
from ..core.exceptions import ConflictError, NotFoundError, StorageUnavailableError, ValidationError
from ..crud.crud_consultation import crud_consultations
from ..crud.crud_md_review_event import crud_md_review_events
from ..models.consultation import Consultation
from ..models.md_review_event import MDReviewEvent
from ..models.tier import ConsultationTier

LOGGER = logging.getLogger(__name__)

MIN_CLINICAL_ACCURACY = 1
MAX_CLINICAL_ACCURACY = 5
MAX_CAS_ATTEMPTS = 3

STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


@dataclass(frozen=True)
class PromotionThresholds:
    specialist_count: int = 4
    consensus: float = 0.80
    clinical_accuracy: int = 4

    @classmethod
    def from_settings(cls, tier_settings: TierPromotionSettings) -> "PromotionThresholds":
        return cls(
            specialist_count=tier_settings.TIER_SPECIALIST_THRESHOLD,
            consensus=tier_settings.TIER_CONSENSUS_THRESHOLD,
            clinical_accuracy=tier_settings.TIER_ACCURACY_THRESHOLD,
        )


@dataclass(frozen=True)
class ReviewEvent:
    """One MD judgment on a consultation."""

    reviewer_id: str
    approved: bool
    clinical_accuracy: int
    feedback_notes: str | None = None
    review_id: str | None = None

    def validate(self) -> None:
        if not isinstance(self.reviewer_id, str) or not self.reviewer_id.strip():
            raise ValidationError("reviewerId is required", field="reviewerId")
        if not isinstance(self.approved, bool):
            raise ValidationError("approved (boolean) is required", field="approved")
        if (
            isinstance(self.clinical_accuracy, bool)
            or not isinstance(self.clinical_accuracy, int)
            or not MIN_CLINICAL_ACCURACY <= self.clinical_accuracy <= MAX_CLINICAL_ACCURACY
        ):
            raise ValidationError(
                f"clinicalAccuracy must be between {MIN_CLINICAL_ACCURACY} and {MAX_CLINICAL_ACCURACY}",
                field="clinicalAccuracy",
            )

    def fingerprint(self) -> str:
        """Stable key identifying this event across duplicate deliveries."""
        if self.review_id:
            return f"id:{self.review_id}"
        raw = "|".join(
            [
                self.reviewer_id.strip(),
                "1" if self.approved else "0",
                str(self.clinical_accuracy),
                (self.feedback_notes or "").strip(),
            ]
        )
        return "sha256:" + hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass
class PromotionResult:
    consultation_id: str
    previous_tier: ConsultationTier
    new_tier: ConsultationTier
    duplicate: bool = False

    @property
    def tier_upgraded(self) -> bool:
        return self.new_tier.rank > self.previous_tier.rank

    def to_dict(self) -> dict[str, Any]:
        return {
            "consultationId": self.consultation_id,
            "previousTier": self.previous_tier.value,
            "newTier": self.new_tier.value,
            "tierUpgraded": self.tier_upgraded,
            "duplicate": self.duplicate,
        }


def next_tier(
    current: ConsultationTier,
    *,
    specialist_count: int,
    consensus: float | None,
    approved: bool,
    clinical_accuracy: int,
    thresholds: PromotionThresholds = PromotionThresholds(),
) -> ConsultationTier:
    """Tier after applying one review event. Never lower than ``current``."""
    if not approved:
        return current

    if current is ConsultationTier.EXCEPTIONAL:
        return current
    if current is ConsultationTier.VERIFIED:
        return ConsultationTier.EXCEPTIONAL

    tier = current
    if tier is ConsultationTier.STANDARD:
        enough_specialists = (specialist_count or 0) >= thresholds.specialist_count
        enough_consensus = consensus is not None and consensus >= thresholds.consensus
        if enough_specialists or enough_consensus:
            tier = ConsultationTier.COMPLETE

    if tier is ConsultationTier.COMPLETE and clinical_accuracy >= thresholds.clinical_accuracy:
        tier = ConsultationTier.VERIFIED

    return tier


def current_tier_of(consultation: Consultation) -> ConsultationTier:
    return ConsultationTier(consultation.tier or ConsultationTier.STANDARD.value)


class TierPromotionService:
    """Apply MD review events to consultations."""

    def __init__(
        self,
        db: AsyncSession,
        thresholds: PromotionThresholds | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.db = db
        self.thresholds = thresholds or PromotionThresholds.from_settings(settings)
        self.clock = clock

    async def promote(self, consultation_id: str, event: ReviewEvent) -> PromotionResult:
        """Record a review and advance the tier in one compare-and-swap update.

        Every applied event is stored under its fingerprint in the same
        transaction, so a redelivery, even after later reviews, returns the
        outcome it produced the first time and writes nothing.

        Raises ValidationError before any storage access, NotFoundError for an
        unknown consultation, ConflictError when concurrent writers keep winning,
        and StorageUnavailableError when the database cannot be reached.
        """
        if not isinstance(consultation_id, str) or not consultation_id.strip():
            raise ValidationError("consultationId is required", field="consultationId")
        event.validate()
        review_key = event.fingerprint()

        try:
            for attempt in range(1, MAX_CAS_ATTEMPTS + 1):
                recorded = await crud_md_review_events.get(self.db, consultation_id, review_key)
                if recorded is not None:
                    result = PromotionResult(
                        consultation_id,
                        ConsultationTier(recorded.previous_tier),
                        ConsultationTier(recorded.new_tier),
                        duplicate=True,
                    )
                    await self.db.rollback()
                    LOGGER.info(f"Duplicate MD review {review_key} for {consultation_id}; nothing written")
                    return result

                consultation = await crud_consultations.get(self.db, consultation_id)
                if consultation is None:
                    await self.db.rollback()
                    raise NotFoundError("Consultation not found", consultationId=consultation_id)

                previous = current_tier_of(consultation)
                new = next_tier(
                    previous,
                    specialist_count=consultation.specialist_count,
                    consensus=consultation.consensus_percentage,
                    approved=event.approved,
                    clinical_accuracy=event.clinical_accuracy,
                    thresholds=self.thresholds,
                )

                applied = await crud_consultations.apply_review(
                    self.db,
                    consultation_id,
                    expected_tier=consultation.tier,
                    expected_review_key=consultation.md_review_key,
                    values={
                        "tier": new.value,
                        "md_reviewed": True,
                        "md_approved": event.approved,
                        "md_clinical_accuracy": event.clinical_accuracy,
                        "md_reviewer_id": event.reviewer_id.strip(),
                        "md_feedback_notes": event.feedback_notes,
                        "md_reviewed_at": self.clock(),
                        "md_review_key": review_key,
                    },
                )
                if not applied:
                    await self.db.rollback()
                    LOGGER.warning(f"Concurrent review update on {consultation_id}, retrying (attempt {attempt})")
                    continue

                try:
                    await crud_md_review_events.create(
                        self.db,
                        MDReviewEvent(
                            consultation_id=consultation_id,
                            review_key=review_key,
                            reviewer_id=event.reviewer_id.strip(),
                            approved=event.approved,
                            clinical_accuracy=event.clinical_accuracy,
                            previous_tier=previous.value,
                            new_tier=new.value,
                        ),
                    )
                    await self.db.commit()
                except IntegrityError:
                    # Same event committed by another writer; the next pass reports its outcome
                    await self.db.rollback()
                    LOGGER.warning(f"MD review {review_key} for {consultation_id} raced a redelivery, re-reading")
                    continue

                if new is not previous:
                    LOGGER.info(f"Consultation {consultation_id} promoted {previous.value} -> {new.value}")
                else:
                    LOGGER.info(
                        f"MD review recorded for {consultation_id} "
                        f"(approved={event.approved}); tier stays {previous.value}"
                    )
                return PromotionResult(consultation_id, previous, new)
        except STORAGE_ERRORS as e:
            await self._safe_rollback()
            LOGGER.error(f"MD review update failed for {consultation_id}: {e}")
            raise StorageUnavailableError("Consultation store is unavailable") from e

        raise ConflictError(
            "Consultation was modified concurrently; resubmit the review",
            consultationId=consultation_id,
        )

    async def _safe_rollback(self) -> None:
        try:
            await self.db.rollback()
        except STORAGE_ERRORS as e:
            LOGGER.warning(f"Rollback after storage failure also failed: {e}")

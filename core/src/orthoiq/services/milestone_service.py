"""Milestone feedback: store locally, then ask the agents service to score it."""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, StorageUnavailableError, ValidationError
from ..crud.crud_consultation import crud_consultations
from ..crud.crud_milestone import crud_milestones
from ..models.milestone import MilestoneFeedback
from .agents_client import AgentsServiceClient

LOGGER = logging.getLogger(__name__)

MILESTONE_DAYS = (3, 7, 14, 21, 30)
PENDING_ANALYSIS = "pending_analysis"

STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


@dataclass
class MilestoneSubmission:
    consultation_id: str
    patient_id: str
    milestone_day: int
    pain_level: int | None = None
    functional_score: int | None = None
    adherence: float | None = None
    completed_interventions: list[str] = field(default_factory=list)
    new_symptoms: list[str] = field(default_factory=list)
    concern_flags: list[str] = field(default_factory=list)
    overall_progress: str | None = None
    satisfaction_so_far: int | None = None
    difficulties_encountered: str | None = None

    def validate(self) -> None:
        if self.milestone_day not in MILESTONE_DAYS:
            raise ValidationError(
                f"milestoneDay must be one of {', '.join(str(d) for d in MILESTONE_DAYS)}",
                field="milestoneDay",
            )
        _check_range("painLevel", self.pain_level, 0, 10)
        _check_range("functionalScore", self.functional_score, 0, 100)
        _check_range("adherence", self.adherence, 0.0, 1.0)
        _check_range("satisfactionSoFar", self.satisfaction_so_far, 1, 10)

    def to_agents_payload(self) -> dict[str, Any]:
        return {
            "consultationId": self.consultation_id,
            "patientId": self.patient_id,
            "milestoneDay": self.milestone_day,
            "progressData": {
                "painLevel": self.pain_level,
                "functionalScore": self.functional_score,
                "adherence": self.adherence,
                "completedInterventions": self.completed_interventions,
                "newSymptoms": self.new_symptoms,
                "concernFlags": self.concern_flags,
            },
            "patientReportedOutcome": {
                "overallProgress": self.overall_progress,
                "satisfactionSoFar": self.satisfaction_so_far,
                "difficultiesEncountered": self.difficulties_encountered,
            },
        }


@dataclass
class MilestoneOutcome:
    milestone: MilestoneFeedback
    analyzed: bool
    agents_result: dict[str, Any] | None = None


def _check_range(name: str, value, low, high) -> None:
    if value is not None and not low <= value <= high:
        raise ValidationError(f"{name} must be between {low} and {high}", field=name)


def parse_analysis(agents_result: Any) -> dict[str, Any] | None:
    """Map an agents reply onto the milestone analysis columns.

    ``tokenReward`` may be an object with ``amount`` or a bare number. Anything
    that is not a JSON object yields None and the row stays pending.
    """
    if not isinstance(agents_result, dict):
        return None

    reward = agents_result.get("tokenReward")
    if isinstance(reward, dict):
        reward = reward.get("amount")
    if isinstance(reward, bool) or not isinstance(reward, (int, float)):
        reward = 0

    next_milestone = agents_result.get("nextMilestone")
    next_day = next_milestone.get("day") if isinstance(next_milestone, dict) else None
    progress_status = agents_result.get("progressStatus")
    if not isinstance(progress_status, str) or not progress_status:
        progress_status = PENDING_ANALYSIS
    achieved = agents_result.get("milestoneAchieved")

    return {
        "milestone_achieved": achieved if isinstance(achieved, bool) else None,
        "progress_status": progress_status,
        "token_reward": float(reward),
        "next_milestone_day": next_day if isinstance(next_day, int) and not isinstance(next_day, bool) else None,
    }


class MilestoneService:
    def __init__(self, db: AsyncSession, agents: AgentsServiceClient):
        self.db = db
        self.agents = agents

    async def submit(self, submission: MilestoneSubmission) -> MilestoneOutcome:
        submission.validate()

        try:
            consultation = await crud_consultations.get(self.db, submission.consultation_id)
            if consultation is None:
                raise NotFoundError("Consultation not found", consultationId=submission.consultation_id)

            milestone = await crud_milestones.upsert_for_day(
                self.db,
                {
                    "milestone_id": f"milestone_{uuid.uuid4().hex}",
                    "consultation_id": submission.consultation_id,
                    "patient_id": submission.patient_id,
                    "milestone_day": submission.milestone_day,
                    "pain_level": submission.pain_level,
                    "functional_score": submission.functional_score,
                    "adherence": submission.adherence,
                    "overall_progress": submission.overall_progress,
                    "satisfaction_so_far": submission.satisfaction_so_far,
                    "difficulties_encountered": submission.difficulties_encountered,
                    "concern_flags": submission.concern_flags or None,
                },
            )
            await self.db.commit()
        except STORAGE_ERRORS as e:
            await self.db.rollback()
            raise StorageUnavailableError("Milestone store is unavailable") from e

        LOGGER.info(
            f"Milestone feedback stored for consultation {submission.consultation_id}, "
            f"day {submission.milestone_day}"
        )

        agents_result = await self.agents.submit_milestone(submission.to_agents_payload())
        analysis = parse_analysis(agents_result)
        if analysis is None:
            if agents_result is not None:
                LOGGER.warning(f"Unusable milestone analysis for {submission.consultation_id}: {agents_result!r}")
            return MilestoneOutcome(milestone=milestone, analyzed=False)

        try:
            await crud_milestones.update_analysis(self.db, milestone.id, **analysis)
            await self.db.commit()
            milestone = await crud_milestones.get_for_day(
                self.db, submission.consultation_id, submission.milestone_day
            )
        except STORAGE_ERRORS as e:
            await self.db.rollback()
            raise StorageUnavailableError("Milestone store is unavailable") from e

        return MilestoneOutcome(milestone=milestone, analyzed=True, agents_result=agents_result)

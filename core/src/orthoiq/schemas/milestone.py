"""Milestone feedback schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from ..core.schemas import CamelModel


class ProgressData(CamelModel):
    pain_level: Optional[int] = None
    functional_score: Optional[int] = None
    adherence: Optional[float] = None
    completed_interventions: list[str] = Field(default_factory=list)
    new_symptoms: list[str] = Field(default_factory=list)
    concern_flags: list[str] = Field(default_factory=list)


class PatientReportedOutcome(CamelModel):
    overall_progress: Optional[str] = None
    satisfaction_so_far: Optional[int] = None
    difficulties_encountered: Optional[str] = None


class MilestoneSubmit(CamelModel):
    consultation_id: str = Field(..., min_length=1, max_length=255)
    patient_id: str = Field(..., min_length=1, max_length=255)
    milestone_day: int
    progress_data: ProgressData = Field(default_factory=ProgressData)
    patient_reported_outcome: PatientReportedOutcome = Field(default_factory=PatientReportedOutcome)


class MilestoneRead(CamelModel):
    milestone_id: str
    consultation_id: str
    patient_id: str
    milestone_day: int
    pain_level: Optional[int] = None
    functional_score: Optional[int] = None
    adherence: Optional[float] = None
    overall_progress: Optional[str] = None
    satisfaction_so_far: Optional[int] = None
    concern_flags: Optional[list[str]] = None
    milestone_achieved: Optional[bool] = None
    progress_status: str
    token_reward: float
    next_milestone_day: Optional[int] = None
    created_at: datetime


class MilestoneResponse(CamelModel):
    success: bool = True
    milestone: MilestoneRead
    analyzed: bool
    message: Optional[str] = None
    agents_result: Optional[dict[str, Any]] = None

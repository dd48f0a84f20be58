"""Consultation schemas for request/response validation."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.schemas import CamelModel
from ..models.tier import ConsultationMode, ConsultationTier


class ConsultationCreate(CamelModel):
    consultation_id: str = Field(..., min_length=1, max_length=255)
    fid: str = Field(..., min_length=1, max_length=255)
    mode: ConsultationMode = ConsultationMode.FAST
    question_id: Optional[int] = None
    specialist_count: int = Field(0, ge=0)
    consensus_percentage: Optional[float] = Field(None, ge=0.0, le=1.0)
    participating_specialists: Optional[list[str]] = None
    coordination_summary: Optional[str] = None


class SpecialistConsensusUpdate(CamelModel):
    specialist_count: int = Field(..., ge=0)
    consensus_percentage: Optional[float] = Field(None, ge=0.0, le=1.0)
    participating_specialists: Optional[list[str]] = None
    coordination_summary: Optional[str] = None


class ConsultationRead(CamelModel):
    consultation_id: str
    fid: str
    question_id: Optional[int] = None
    mode: ConsultationMode
    specialist_count: int
    consensus_percentage: Optional[float] = None
    participating_specialists: Optional[list[str]] = None
    coordination_summary: Optional[str] = None
    tier: ConsultationTier
    requires_md_review: bool
    md_reviewed: bool
    md_approved: Optional[bool] = None
    md_clinical_accuracy: Optional[int] = None
    md_reviewer_id: Optional[str] = None
    md_feedback_notes: Optional[str] = None
    md_reviewed_at: Optional[datetime] = None
    is_private: bool
    created_at: datetime


class ReviewFlagUpdate(CamelModel):
    requires_review: bool
    reason: Optional[str] = None
    quality_score: Optional[float] = None


class ReviewFlagResponse(CamelModel):
    success: bool = True
    consultation_id: str
    requires_review: bool
    message: str


class PrivacyUpdate(CamelModel):
    fid: str = Field(..., min_length=1, max_length=255)
    is_private: bool


class PrivacyStatus(CamelModel):
    success: bool = True
    case_id: str
    is_private: bool
    owner_fid: Optional[str] = None
    message: Optional[str] = None

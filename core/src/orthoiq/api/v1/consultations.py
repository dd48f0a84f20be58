"""Consultation registration, agent callbacks and owner privacy."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions import OrthoIQError, to_http_exception
from ...schemas.consultation import (
    ConsultationCreate,
    ConsultationRead,
    PrivacyStatus,
    PrivacyUpdate,
    ReviewFlagResponse,
    ReviewFlagUpdate,
    SpecialistConsensusUpdate,
)
from ...services.consultation_service import ConsultationService

router = APIRouter(prefix="/consultations", tags=["Consultations"])


async def get_consultation_service(db: Annotated[AsyncSession, Depends(async_get_db)]) -> ConsultationService:
    return ConsultationService(db)


@router.post(
    "",
    response_model=ConsultationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register Consultation",
    description="Register a consultation produced by the agents pipeline; it starts at the standard tier",
)
async def create_consultation(
    payload: ConsultationCreate,
    service: Annotated[ConsultationService, Depends(get_consultation_service)],
):
    try:
        consultation = await service.create(**payload.model_dump())
    except OrthoIQError as e:
        raise to_http_exception(e) from e
    return ConsultationRead.model_validate(consultation)


@router.get("/{consultation_id}", response_model=ConsultationRead, summary="Get Consultation")
async def get_consultation(
    consultation_id: str,
    service: Annotated[ConsultationService, Depends(get_consultation_service)],
):
    try:
        consultation = await service.get(consultation_id)
    except OrthoIQError as e:
        raise to_http_exception(e) from e
    return ConsultationRead.model_validate(consultation)


@router.patch(
    "/{consultation_id}/specialists",
    response_model=ConsultationRead,
    summary="Record Specialist Consensus",
    description="Specialist-agent callback; updates specialist count and consensus, never the tier",
)
async def record_specialist_consensus(
    consultation_id: str,
    payload: SpecialistConsensusUpdate,
    service: Annotated[ConsultationService, Depends(get_consultation_service)],
):
    try:
        consultation = await service.record_specialist_consensus(consultation_id, **payload.model_dump())
    except OrthoIQError as e:
        raise to_http_exception(e) from e
    return ConsultationRead.model_validate(consultation)


@router.patch("/{consultation_id}/flag-for-review", response_model=ReviewFlagResponse, summary="Flag For MD Review")
async def flag_for_review(
    consultation_id: str,
    payload: ReviewFlagUpdate,
    service: Annotated[ConsultationService, Depends(get_consultation_service)],
):
    try:
        await service.flag_for_review(
            consultation_id,
            payload.requires_review,
            reason=payload.reason,
            quality_score=payload.quality_score,
        )
    except OrthoIQError as e:
        raise to_http_exception(e) from e

    return ReviewFlagResponse(
        consultation_id=consultation_id,
        requires_review=payload.requires_review,
        message="Flagged for MD review" if payload.requires_review else "Review flag cleared",
    )


@router.get("/{consultation_id}/privacy", response_model=PrivacyStatus, summary="Get Privacy")
async def get_privacy(
    consultation_id: str,
    service: Annotated[ConsultationService, Depends(get_consultation_service)],
):
    try:
        consultation = await service.get(consultation_id)
    except OrthoIQError as e:
        raise to_http_exception(e) from e
    return PrivacyStatus(case_id=consultation_id, is_private=consultation.is_private, owner_fid=consultation.fid)


@router.patch("/{consultation_id}/privacy", response_model=PrivacyStatus, summary="Update Privacy")
async def update_privacy(
    consultation_id: str,
    payload: PrivacyUpdate,
    service: Annotated[ConsultationService, Depends(get_consultation_service)],
):
    try:
        await service.set_privacy(consultation_id, payload.fid, payload.is_private)
    except OrthoIQError as e:
        raise to_http_exception(e) from e

    return PrivacyStatus(
        case_id=consultation_id,
        is_private=payload.is_private,
        message=f"Case is now {'private' if payload.is_private else 'public'}",
    )

"""Patient milestone feedback."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions import OrthoIQError, to_http_exception
from ...schemas.milestone import MilestoneRead, MilestoneResponse, MilestoneSubmit
from ...services.agents_client import AgentsServiceClient, get_agents_client
from ...services.milestone_service import MilestoneService, MilestoneSubmission

router = APIRouter(prefix="/feedback", tags=["Feedback"])


async def get_milestone_service(
    db: Annotated[AsyncSession, Depends(async_get_db)],
    agents: Annotated[AgentsServiceClient, Depends(get_agents_client)],
) -> MilestoneService:
    return MilestoneService(db, agents)


@router.post(
    "/milestone",
    response_model=MilestoneResponse,
    summary="Submit Milestone Feedback",
    description="Store a day 3/7/14/21/30 progress report and request the agents' progress analysis",
)
async def submit_milestone_feedback(
    payload: MilestoneSubmit,
    service: Annotated[MilestoneService, Depends(get_milestone_service)],
):
    submission = MilestoneSubmission(
        consultation_id=payload.consultation_id,
        patient_id=payload.patient_id,
        milestone_day=payload.milestone_day,
        pain_level=payload.progress_data.pain_level,
        functional_score=payload.progress_data.functional_score,
        adherence=payload.progress_data.adherence,
        completed_interventions=payload.progress_data.completed_interventions,
        new_symptoms=payload.progress_data.new_symptoms,
        concern_flags=payload.progress_data.concern_flags,
        overall_progress=payload.patient_reported_outcome.overall_progress,
        satisfaction_so_far=payload.patient_reported_outcome.satisfaction_so_far,
        difficulties_encountered=payload.patient_reported_outcome.difficulties_encountered,
    )
    try:
        outcome = await service.submit(submission)
    except OrthoIQError as e:
        raise to_http_exception(e) from e

    return MilestoneResponse(
        milestone=MilestoneRead.model_validate(outcome.milestone),
        analyzed=outcome.analyzed,
        message=None if outcome.analyzed else "Feedback saved; progress analysis pending",
        agents_result=outcome.agents_result,
    )

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..dependencies import get_pipeline
from ..schemas.requests import AssessmentRequest, BlueprintRequest, DayTypeDetailsRequest
from ..services.pipeline import PlanPipeline

router = APIRouter(prefix="/api")

logger = structlog.get_logger(__name__)


def _wire(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.post("/generate-90day-plan")
async def generate_90_day_plan(body: AssessmentRequest, pipeline: PlanPipeline = Depends(get_pipeline)):
    logger.info("generate_90_day_plan_requested", user_id=body.assessment.user_id)
    program = await pipeline.generate_90_day_plan(body.assessment)
    return _wire(program)


@router.post("/plan-blueprint")
async def plan_blueprint(body: AssessmentRequest, pipeline: PlanPipeline = Depends(get_pipeline)):
    return _wire(await pipeline.generate_blueprint(body.assessment))


@router.post("/plan-details-workouts")
async def plan_details_workouts(body: DayTypeDetailsRequest, pipeline: PlanPipeline = Depends(get_pipeline)):
    details = await pipeline.generate_workout_details(body.assessment, body.blueprint, body.day_type_ids)
    return _wire(details)


@router.post("/plan-details-recovery")
async def plan_details_recovery(body: DayTypeDetailsRequest, pipeline: PlanPipeline = Depends(get_pipeline)):
    details = await pipeline.generate_recovery_details(body.assessment, body.blueprint, body.day_type_ids)
    return _wire(details)


@router.post("/plan-details-coach-notes")
async def plan_details_coach_notes(body: BlueprintRequest, pipeline: PlanPipeline = Depends(get_pipeline)):
    return _wire(await pipeline.generate_coach_notes(body.assessment, body.blueprint))


@router.post("/plan-details")
async def plan_details(body: BlueprintRequest, pipeline: PlanPipeline = Depends(get_pipeline)):
    return _wire(await pipeline.generate_plan_details(body.assessment, body.blueprint))


@router.post("/plan-template")
async def plan_template(body: AssessmentRequest, pipeline: PlanPipeline = Depends(get_pipeline)):
    return _wire(await pipeline.generate_program_template(body.assessment))

import structlog
from fastapi import APIRouter, Depends

from ..dependencies import get_coaching_service
from ..schemas.coaching import CoachCheckInRequest, CoachHintRequest
from ..services.coaching import CoachingService

router = APIRouter(prefix="/api")

logger = structlog.get_logger(__name__)


@router.post("/coach-checkin")
async def coach_check_in(body: CoachCheckInRequest, coach: CoachingService = Depends(get_coaching_service)):
    logger.info("coach_check_in_requested", type=body.type)
    return {"response": await coach.check_in(body)}


@router.post("/coach-hint")
async def coach_hint(body: CoachHintRequest, coach: CoachingService = Depends(get_coaching_service)):
    return {"hint": await coach.coach_hint(body)}

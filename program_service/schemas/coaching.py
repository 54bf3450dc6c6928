from typing import Literal

from pydantic import Field

from .blueprint import PROGRAM_LENGTH_DAYS
from .common import CamelModel


class CheckInContext(CamelModel):
    day_number: int | None = Field(default=None, ge=1, le=PROGRAM_LENGTH_DAYS)
    workout_name: str | None = None


class CoachCheckInRequest(CamelModel):
    """What the athlete typed just before or after a session."""

    user_message: str = Field(min_length=1)
    type: Literal["pre", "post"]
    context: CheckInContext | None = None


class CoachHintRequest(CamelModel):
    streak_days: int = Field(ge=0)
    on_time_percentage: float = Field(ge=0, le=100)
    completion_rate: float = Field(ge=0, le=100)
    recent_checkins: int = Field(ge=0)
    tone: Literal["encouraging", "motivational", "analytical"]

from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_AGE = 30
DEFAULT_WEIGHT_KG = 70
DEFAULT_HEIGHT_CM = 170
DEFAULT_GENDER = "male"
DEFAULT_WEEKLY_DAYS = 3
DEFAULT_DAILY_MINUTES = 45
DEFAULT_EXPERIENCE = "intermediate"
DEFAULT_ACTIVITY_LEVEL = "moderately_active"

FULL_GYM_DESCRIPTION = "Full gym access (barbells, dumbbells, machines, cables, etc.)"
BODYWEIGHT_DESCRIPTION = "No equipment (bodyweight only)"


class Assessment(BaseModel):
    """Onboarding answers as stored by the mobile client (snake_case keys)."""

    id: str | None = None
    user_id: str | None = None
    goals: list[str] = Field(default_factory=list)
    weekly_days: int | None = Field(default=None, ge=1, le=7)
    available_days: list[str] | None = None
    height_cm: float | None = Field(default=None, gt=0)
    weight_kg: float | None = Field(default=None, gt=0)
    age: int | None = Field(default=None, gt=0)
    gender: Literal["male", "female", "other"] | None = None
    name: str | None = None
    has_equipment: bool | None = None
    equipment: list[str] | str | None = None
    daily_minutes: int | None = Field(default=None, gt=0)
    goal_description: str | None = None
    training_experience: str | None = None
    injuries_or_pain: str | None = None
    priority_areas: str | None = None
    activity_level: str | None = None

    @property
    def goal_text(self) -> str:
        return ", ".join(self.goals) if self.goals else "General fitness"

    @property
    def equipment_description(self) -> str:
        if self.has_equipment:
            return FULL_GYM_DESCRIPTION
        if self.equipment:
            listed = ", ".join(self.equipment) if isinstance(self.equipment, list) else self.equipment
            return f"Limited equipment: {listed}"
        return BODYWEIGHT_DESCRIPTION

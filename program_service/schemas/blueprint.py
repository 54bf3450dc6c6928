from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, StringConstraints, model_validator

from .common import StrictCamelModel

MICROCYCLE_LENGTH_DAYS = 14
PROGRAM_LENGTH_DAYS = 90

DayCategory = Literal["strength", "hypertrophy", "conditioning", "recovery"]


class UserProfile(StrictCamelModel):
    goal: str
    training_days_per_week: int = Field(ge=2, le=6)
    session_length_minutes: int = Field(ge=15)
    cardio_preference: str | None = None
    equipment_access: str | None = None
    injuries: list[str] | None = None
    experience_level: Literal["beginner", "intermediate", "advanced"] | None = None
    body_goals: list[str] | None = None
    age: float | None = None
    gender: Literal["male", "female", "other"] | None = None
    height_cm: float | None = Field(default=None, alias="height_cm")
    weight_kg: float | None = Field(default=None, alias="weight_kg")
    activity_level: str | None = None
    priority_areas: str | None = None


class ProgramOverview(StrictCamelModel):
    title: str
    primary_goal: str
    secondary_goals: list[str]
    summary: str = Field(max_length=500)


class DayType(StrictCamelModel):
    id: str = Field(min_length=1)
    label: str
    category: DayCategory
    focus_description: str = Field(max_length=200)
    includes_cardio: bool
    is_recovery_day: bool


class MicrocycleDay(StrictCamelModel):
    day_index: int = Field(ge=1, le=MICROCYCLE_LENGTH_DAYS)
    day_type_id: str


class SplitDesign(StrictCamelModel):
    microcycle_length_days: Literal[14]
    day_types: list[DayType] = Field(min_length=1)
    microcycle_template: list[MicrocycleDay] = Field(
        min_length=MICROCYCLE_LENGTH_DAYS,
        max_length=MICROCYCLE_LENGTH_DAYS,
    )
    program_length_days: Literal[90]

    @model_validator(mode="after")
    def _check_references(self) -> SplitDesign:
        ids = [day_type.id for day_type in self.day_types]
        duplicates = sorted({day_type_id for day_type_id in ids if ids.count(day_type_id) > 1})
        if duplicates:
            raise ValueError(f"duplicate dayTypes ids: {', '.join(duplicates)}")

        indexes = sorted(day.day_index for day in self.microcycle_template)
        if indexes != list(range(1, MICROCYCLE_LENGTH_DAYS + 1)):
            raise ValueError("microcycleTemplate dayIndex values must cover 1..14 exactly once")

        known = set(ids)
        unknown = sorted({day.day_type_id for day in self.microcycle_template if day.day_type_id not in known})
        if unknown:
            raise ValueError(f"microcycleTemplate references unknown dayTypeId(s): {', '.join(unknown)}")
        return self


class DailyMacros(StrictCamelModel):
    calories: int = Field(ge=0)
    protein_grams: float = Field(ge=0)
    carbs_grams: float = Field(ge=0)
    fats_grams: float = Field(ge=0)


class SampleMeal(StrictCamelModel):
    name: str
    description: str = Field(max_length=100)


class NutritionOverview(StrictCamelModel):
    daily_macros: DailyMacros
    sample_meals: list[SampleMeal] = Field(max_length=5)
    guidelines: list[Annotated[str, StringConstraints(max_length=150)]] = Field(max_length=8)


class PlanBlueprint(StrictCamelModel):
    user_profile: UserProfile
    program_overview: ProgramOverview
    split_design: SplitDesign
    nutrition_overview: NutritionOverview

    def day_type(self, day_type_id: str) -> DayType | None:
        return next((dt for dt in self.split_design.day_types if dt.id == day_type_id), None)

    def workout_day_type_ids(self) -> list[str]:
        return [dt.id for dt in self.split_design.day_types if not dt.is_recovery_day]

    def recovery_day_type_ids(self) -> list[str]:
        return [dt.id for dt in self.split_design.day_types if dt.is_recovery_day]

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from pydantic import Field, StringConstraints, model_validator

from .blueprint import MICROCYCLE_LENGTH_DAYS, DayCategory
from .common import StrictCamelModel
from .details import CardioProtocol, CoachNotes, Warmup


class ExerciseTutorial(StrictCamelModel):
    how_to: str
    cues: list[str]
    common_mistakes: list[str]
    progression_tips: list[str] | None = None


class TemplateExercise(StrictCamelModel):
    name: str
    sets: int = Field(ge=1)
    reps: Annotated[int, Field(ge=1)] | Annotated[str, StringConstraints(min_length=1)]
    rest_seconds: int | None = Field(default=None, ge=30)
    equipment: str | None = None
    tempo: str | None = None
    tutorial: ExerciseTutorial | None = None


class TemplateWorkout(StrictCamelModel):
    estimated_duration_minutes: int = Field(ge=1)
    notes: str | None = None
    warmup: Warmup | None = None
    cardio_protocol: CardioProtocol | None = None
    exercises: list[TemplateExercise]


class TemplateRecovery(StrictCamelModel):
    suggestions: list[str]
    description: str | None = None
    extra_tips: list[str] | None = None


class TrainingDay(StrictCamelModel):
    day_index: int = Field(ge=1, le=MICROCYCLE_LENGTH_DAYS)
    is_workout_day: bool
    label: str
    focus: str
    day_type_id: str | None = None
    category: DayCategory | None = None
    workout: TemplateWorkout | None = None
    recovery: TemplateRecovery | None = None

    def exercises(self) -> list[TemplateExercise]:
        return self.workout.exercises if self.workout else []


class DailyMacroTargets(StrictCamelModel):
    calories: int = Field(ge=0)
    protein_grams: float = Field(ge=0)
    carbs_grams: float = Field(ge=0)
    fats_grams: float = Field(ge=0)
    notes: str


class TemplateNutrition(StrictCamelModel):
    daily_macro_targets: DailyMacroTargets


class TemplateMeta(StrictCamelModel):
    goal: str
    days_per_week: int = Field(ge=2, le=6)
    minutes_per_workout: int = Field(ge=15)
    summary: str | None = None
    description: str | None = None


class ProgramTemplate(StrictCamelModel):
    """Repeating 14-day template: the skeleton stage output and the core of a Program."""

    meta: TemplateMeta
    training: list[TrainingDay] = Field(min_length=MICROCYCLE_LENGTH_DAYS, max_length=MICROCYCLE_LENGTH_DAYS)
    nutrition: TemplateNutrition

    @model_validator(mode="after")
    def _check_day_indexes(self) -> ProgramTemplate:
        indexes = sorted(day.day_index for day in self.training)
        if indexes != list(range(1, MICROCYCLE_LENGTH_DAYS + 1)):
            raise ValueError("training dayIndex values must cover 1..14 exactly once")
        return self

    def day(self, day_index: int) -> TrainingDay | None:
        return next((day for day in self.training if day.day_index == day_index), None)


class TutoredProgramTemplate(ProgramTemplate):
    @model_validator(mode="after")
    def _require_tutorials(self) -> TutoredProgramTemplate:
        missing = [
            f"day {day.day_index}: {exercise.name}"
            for day in self.training
            for exercise in day.exercises()
            if exercise.tutorial is None
        ]
        if missing:
            raise ValueError(f"exercises without tutorial: {', '.join(missing)}")
        return self


class AssembledTemplate(ProgramTemplate):
    coach_notes: CoachNotes


@dataclass(frozen=True)
class ExerciseRef:
    """Position of one skeleton exercise, as handed to the tutorial stage."""

    day_index: int
    exercise_index: int
    name: str
    label: str
    focus: str
    equipment: str


class TutorialEntry(StrictCamelModel):
    day_index: int
    exercise_index: int = Field(ge=0)
    tutorial: ExerciseTutorial


class TutorialBatch(StrictCamelModel):
    tutorials: list[TutorialEntry]

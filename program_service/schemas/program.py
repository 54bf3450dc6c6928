from __future__ import annotations

from datetime import date

from pydantic import Field

from .common import CamelModel
from .template import AssembledTemplate, ExerciseTutorial


class ScheduledExercise(CamelModel):
    name: str
    sets: int
    reps: int | str
    rest: str
    equipment: str | None = None
    tutorial: ExerciseTutorial


class ScheduledWorkout(CamelModel):
    id: str
    day: int
    name: str
    focus: str
    scheduled_date: date
    exercises: list[ScheduledExercise]


class Program(CamelModel):
    program_length_days: int
    start_date: date
    template: AssembledTemplate
    workouts: list[ScheduledWorkout] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    weekly_days: int | None = None

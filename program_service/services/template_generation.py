from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..exceptions import StageValidationError
from ..schemas.template import ExerciseRef, ProgramTemplate, TutorialEntry, TutoredProgramTemplate
from .normalizer import fallback_tutorial
from .validation import validate

TUTORIAL_CHUNK_SIZE = 40
DEFAULT_EQUIPMENT = "Bodyweight"


def collect_exercise_refs(skeleton: ProgramTemplate) -> list[ExerciseRef]:
    return [
        ExerciseRef(
            day_index=day.day_index,
            exercise_index=position,
            name=exercise.name,
            label=day.label,
            focus=day.focus,
            equipment=exercise.equipment or DEFAULT_EQUIPMENT,
        )
        for day in skeleton.training
        if day.is_workout_day
        for position, exercise in enumerate(day.exercises())
    ]


def merge_tutorials(skeleton: ProgramTemplate, entries: Iterable[TutorialEntry]) -> TutoredProgramTemplate:
    """Attach generated tutorials by (dayIndex, exerciseIndex) and fill the gaps.

    Entries pointing at a day or exercise that does not exist are ignored;
    exercises left without a tutorial get a generic one built from their name.
    """
    data: dict[str, Any] = skeleton.model_dump(by_alias=True, exclude_none=True)
    days = {day["dayIndex"]: day for day in data["training"]}

    for entry in entries:
        exercises = days.get(entry.day_index, {}).get("workout", {}).get("exercises", [])
        if 0 <= entry.exercise_index < len(exercises):
            exercises[entry.exercise_index]["tutorial"] = entry.tutorial.model_dump(by_alias=True, exclude_none=True)

    for day in data["training"]:
        for exercise in day.get("workout", {}).get("exercises", []):
            exercise.setdefault("tutorial", fallback_tutorial(exercise["name"]))

    result = validate(TutoredProgramTemplate, data)
    if not result.ok:
        raise StageValidationError("program_template", 1, result.issues)
    return result.unwrap()

"""Targeted repairs for model output, applied before schema validation.

Every public function works on a deep copy, only fills gaps or reshapes values
that validation would reject, and is idempotent: running it twice yields the
same document as running it once.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Collection
from dataclasses import dataclass
from typing import Any

from ..schemas.blueprint import MICROCYCLE_LENGTH_DAYS, PROGRAM_LENGTH_DAYS
from ..schemas.details import RECOVERY_MAX_STEPS

FALLBACK_HOW_TO = "Follow proper form and technique."
DEFAULT_RECOVERY_SUGGESTIONS = ("Rest and recovery", "Light mobility work", "Stay hydrated")
PADDED_REST_SUGGESTIONS = ("Focus on recovery", "Light stretching", "Stay hydrated")

AUTO_RECOVERY_DAY_TYPE_ID = "recovery_auto"
AUTO_RECOVERY_DAY_TYPE = {
    "id": AUTO_RECOVERY_DAY_TYPE_ID,
    "label": "Rest & Recovery",
    "category": "recovery",
    "focusDescription": "Full rest or light mobility to absorb the training week.",
    "includesCardio": False,
    "isRecoveryDay": True,
}

DETAILS_ENVELOPE_KEY = "dayTypeDetails"
COACH_NOTES_ENVELOPE_KEYS = ("globalCoachNotes", "coachNotes")

_TEXT_SPLIT = re.compile(r"\n|;")


@dataclass(frozen=True)
class NormalizerOptions:
    pad_template: bool = True
    assign_day_index: bool = True
    exercise_fallbacks: bool = True
    split_recovery_text: bool = True
    unwrap_envelopes: bool = True


DEFAULT_OPTIONS = NormalizerOptions()


def split_text_list(value: Any, default: Collection[str]) -> Any:
    """Turn ``"a; b\\nc"`` into ``["a", "b", "c"]``; anything else that is not a list becomes ``default``."""
    if isinstance(value, str):
        value = [part.strip() for part in _TEXT_SPLIT.split(value) if part.strip()]
    if not isinstance(value, list):
        return list(default)
    return value


def fallback_tutorial(exercise_name: str) -> dict[str, Any]:
    return {
        "howTo": (
            f"Perform {exercise_name} with proper form. "
            "Focus on controlled movement and full range of motion."
        ),
        "cues": ["Maintain proper form throughout", "Control the movement", "Breathe steadily"],
        "commonMistakes": ["Using momentum instead of muscle control", "Incomplete range of motion"],
    }


def _unwrap(raw: Any, keys: Collection[str]) -> Any:
    while isinstance(raw, dict) and len(raw) == 1:
        (key, inner), = raw.items()
        if key not in keys or not isinstance(inner, dict):
            break
        raw = inner
    return raw


def _assign_day_indexes(days: list[Any]) -> None:
    for position, day in enumerate(days, start=1):
        if isinstance(day, dict) and not day.get("dayIndex"):
            day["dayIndex"] = position


def _rest_training_day(day_index: int) -> dict[str, Any]:
    return {
        "dayIndex": day_index,
        "isWorkoutDay": False,
        "label": f"Day {day_index}",
        "focus": "Rest",
        "recovery": {"suggestions": list(PADDED_REST_SUGGESTIONS)},
    }


def _recovery_day_type_id(split: dict[str, Any]) -> str | None:
    day_types = split.get("dayTypes")
    if not isinstance(day_types, list):
        return None
    for day_type in day_types:
        if isinstance(day_type, dict) and day_type.get("isRecoveryDay") is True and day_type.get("id"):
            return str(day_type["id"])
    day_types.append(dict(AUTO_RECOVERY_DAY_TYPE))
    return AUTO_RECOVERY_DAY_TYPE_ID


def _repair_microcycle_template(split: dict[str, Any], options: NormalizerOptions) -> None:
    template = split.get("microcycleTemplate")
    if not isinstance(template, list):
        return

    if options.assign_day_index:
        _assign_day_indexes(template)

    if options.pad_template:
        if len(template) * 2 == MICROCYCLE_LENGTH_DAYS:
            # A weekly pattern: repeat it for the second week.
            second_week = copy.deepcopy(template)
            for position, entry in enumerate(second_week, start=len(template) + 1):
                if isinstance(entry, dict):
                    entry["dayIndex"] = position
            template.extend(second_week)
        elif len(template) < MICROCYCLE_LENGTH_DAYS:
            rest_id = _recovery_day_type_id(split)
            if rest_id is not None:
                for day_index in range(len(template) + 1, MICROCYCLE_LENGTH_DAYS + 1):
                    template.append({"dayIndex": day_index, "dayTypeId": rest_id})
        split["microcycleTemplate"] = template[:MICROCYCLE_LENGTH_DAYS]
        split["microcycleLengthDays"] = MICROCYCLE_LENGTH_DAYS
        split.setdefault("programLengthDays", PROGRAM_LENGTH_DAYS)


def _repair_detail_exercise(exercise: dict[str, Any]) -> None:
    nested = exercise.get("tutorial") if isinstance(exercise.get("tutorial"), dict) else {}
    if not isinstance(exercise.get("howTo"), str):
        how_to = nested.get("howTo")
        exercise["howTo"] = how_to if isinstance(how_to, str) and how_to else exercise.get("notes") or FALLBACK_HOW_TO
    for key in ("cues", "commonMistakes", "progressionTips"):
        if key not in exercise and key in nested:
            exercise[key] = nested[key]
        exercise[key] = split_text_list(exercise.get(key), ())
    exercise.pop("tutorial", None)

    reps = exercise.get("reps")
    if isinstance(reps, (int, float)) and not isinstance(reps, bool):
        exercise["reps"] = str(int(reps)) if float(reps).is_integer() else str(reps)


def _repair_template_exercise(exercise: dict[str, Any]) -> None:
    tutorial = exercise.get("tutorial")
    if not isinstance(tutorial, dict):
        return
    if "howTo" not in tutorial or tutorial["howTo"] is None:
        tutorial["howTo"] = exercise.get("notes") or FALLBACK_HOW_TO
    for key in ("cues", "commonMistakes"):
        if not isinstance(tutorial.get(key), list):
            tutorial[key] = []


def _repair_recovery_routine(routine: dict[str, Any]) -> None:
    routine["steps"] = split_text_list(routine.get("steps"), DEFAULT_RECOVERY_SUGGESTIONS)[:RECOVERY_MAX_STEPS]
    routine["extraTips"] = split_text_list(routine.get("extraTips"), ())


def _repair_day_type_detail(detail: Any, options: NormalizerOptions, *, recovery_stage: bool = False) -> None:
    if not isinstance(detail, dict):
        return
    if options.exercise_fallbacks:
        blocks = detail.get("blocks")
        if isinstance(blocks, list):
            for block in blocks:
                exercises = block.get("exercises") if isinstance(block, dict) else None
                if isinstance(exercises, list):
                    for exercise in exercises:
                        if isinstance(exercise, dict):
                            _repair_detail_exercise(exercise)
    routine = detail.get("recoveryRoutine")
    if isinstance(routine, dict):
        if options.split_recovery_text:
            _repair_recovery_routine(routine)
        if recovery_stage:
            routine.setdefault("isRecoveryDay", True)


def _repair_detail_map(
    raw: Any,
    requested_ids: Collection[str] | None,
    options: NormalizerOptions,
    *,
    recovery_stage: bool = False,
) -> Any:
    if options.unwrap_envelopes:
        raw = _unwrap(raw, (DETAILS_ENVELOPE_KEY,))
    if not isinstance(raw, dict):
        return raw
    if options.unwrap_envelopes and requested_ids:
        wanted = set(requested_ids)
        raw = {key: value for key, value in raw.items() if key in wanted}
    for detail in raw.values():
        _repair_day_type_detail(detail, options, recovery_stage=recovery_stage)
    return raw


def normalize_blueprint(raw: Any, options: NormalizerOptions = DEFAULT_OPTIONS) -> Any:
    raw = copy.deepcopy(raw)
    if isinstance(raw, dict) and isinstance(raw.get("splitDesign"), dict):
        _repair_microcycle_template(raw["splitDesign"], options)
    return raw


def normalize_workout_details(
    raw: Any,
    *,
    requested_ids: Collection[str] | None = None,
    options: NormalizerOptions = DEFAULT_OPTIONS,
) -> Any:
    return _repair_detail_map(copy.deepcopy(raw), requested_ids, options)


def normalize_recovery_details(
    raw: Any,
    *,
    requested_ids: Collection[str] | None = None,
    options: NormalizerOptions = DEFAULT_OPTIONS,
) -> Any:
    return _repair_detail_map(copy.deepcopy(raw), requested_ids, options, recovery_stage=True)


def normalize_coach_notes(raw: Any, options: NormalizerOptions = DEFAULT_OPTIONS) -> Any:
    raw = copy.deepcopy(raw)
    if options.unwrap_envelopes:
        raw = _unwrap(raw, COACH_NOTES_ENVELOPE_KEYS)
    if isinstance(raw, dict) and isinstance(raw.get("phaseBreakdown"), dict):
        raw["phaseBreakdown"] = [raw["phaseBreakdown"]]
    return raw


def normalize_plan_details(
    raw: Any,
    *,
    requested_ids: Collection[str] | None = None,
    options: NormalizerOptions = DEFAULT_OPTIONS,
) -> Any:
    raw = copy.deepcopy(raw)
    if not isinstance(raw, dict):
        return raw
    details = raw.get(DETAILS_ENVELOPE_KEY)
    if isinstance(details, dict):
        raw[DETAILS_ENVELOPE_KEY] = _repair_detail_map(details, requested_ids, options)
    notes = raw.get("globalCoachNotes")
    if isinstance(notes, dict) and isinstance(notes.get("phaseBreakdown"), dict):
        notes["phaseBreakdown"] = [notes["phaseBreakdown"]]
    return raw


def normalize_program_template(raw: Any, options: NormalizerOptions = DEFAULT_OPTIONS) -> Any:
    raw = copy.deepcopy(raw)
    if not isinstance(raw, dict) or not isinstance(raw.get("training"), list):
        return raw
    training: list[Any] = raw["training"]

    if options.pad_template:
        for day_index in range(len(training) + 1, MICROCYCLE_LENGTH_DAYS + 1):
            training.append(_rest_training_day(day_index))
        training = training[:MICROCYCLE_LENGTH_DAYS]
        raw["training"] = training

    if options.assign_day_index:
        _assign_day_indexes(training)

    for day in training:
        if not isinstance(day, dict):
            continue
        workout = day.get("workout")
        if options.exercise_fallbacks and isinstance(workout, dict) and isinstance(workout.get("exercises"), list):
            for exercise in workout["exercises"]:
                if isinstance(exercise, dict):
                    _repair_template_exercise(exercise)
        recovery = day.get("recovery")
        if options.split_recovery_text and not day.get("isWorkoutDay") and isinstance(recovery, dict):
            recovery["suggestions"] = split_text_list(recovery.get("suggestions"), DEFAULT_RECOVERY_SUGGESTIONS)
    return raw


def normalize_tutorials(raw: Any, options: NormalizerOptions = DEFAULT_OPTIONS) -> Any:
    raw = copy.deepcopy(raw)
    if options.unwrap_envelopes and isinstance(raw, list):
        raw = {"tutorials": raw}
    if not isinstance(raw, dict) or not isinstance(raw.get("tutorials"), list):
        return raw
    if options.exercise_fallbacks:
        for item in raw["tutorials"]:
            if isinstance(item, dict) and isinstance(item.get("tutorial"), dict):
                _repair_template_exercise(item)
    return raw

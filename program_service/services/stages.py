"""One parameterized definition per generation stage.

A stage is the tuple (system prompt, output model, normalizer, token budget).
Running it is always the same loop, see ``retry.run_stage``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from ..prompts import (
    BLUEPRINT_SYSTEM_PROMPT,
    COACH_NOTES_SYSTEM_PROMPT,
    PLAN_DETAILS_SYSTEM_PROMPT,
    RECOVERY_DETAILS_SYSTEM_PROMPT,
    SKELETON_SYSTEM_PROMPT,
    TUTORIAL_SYSTEM_PROMPT,
    WORKOUT_DETAILS_SYSTEM_PROMPT,
)
from ..schemas.blueprint import PlanBlueprint
from ..schemas.details import CoachNotes, PlanDetails, RecoveryDetailsMap, WorkoutDetailsMap
from ..schemas.template import ProgramTemplate, TutorialBatch
from . import normalizer

Normalize = Callable[[Any, Sequence[str] | None], Any]


@dataclass(frozen=True)
class StageSpec:
    name: str
    model: type[BaseModel]
    system_prompt: str
    normalize: Normalize
    max_output_tokens: int
    # Light stages get the reduced attempt budget.
    light: bool = False


BLUEPRINT = StageSpec(
    name="blueprint",
    model=PlanBlueprint,
    system_prompt=BLUEPRINT_SYSTEM_PROMPT,
    normalize=lambda raw, _ids: normalizer.normalize_blueprint(raw),
    max_output_tokens=4000,
)

WORKOUT_DETAILS = StageSpec(
    name="workout_details",
    model=WorkoutDetailsMap,
    system_prompt=WORKOUT_DETAILS_SYSTEM_PROMPT,
    normalize=lambda raw, ids: normalizer.normalize_workout_details(raw, requested_ids=ids),
    max_output_tokens=6000,
)

RECOVERY_DETAILS = StageSpec(
    name="recovery_details",
    model=RecoveryDetailsMap,
    system_prompt=RECOVERY_DETAILS_SYSTEM_PROMPT,
    normalize=lambda raw, ids: normalizer.normalize_recovery_details(raw, requested_ids=ids),
    max_output_tokens=3000,
)

COACH_NOTES = StageSpec(
    name="coach_notes",
    model=CoachNotes,
    system_prompt=COACH_NOTES_SYSTEM_PROMPT,
    normalize=lambda raw, _ids: normalizer.normalize_coach_notes(raw),
    max_output_tokens=4000,
)

PLAN_DETAILS = StageSpec(
    name="plan_details",
    model=PlanDetails,
    system_prompt=PLAN_DETAILS_SYSTEM_PROMPT,
    normalize=lambda raw, ids: normalizer.normalize_plan_details(raw, requested_ids=ids),
    max_output_tokens=12000,
)

TEMPLATE_SKELETON = StageSpec(
    name="template_skeleton",
    model=ProgramTemplate,
    system_prompt=SKELETON_SYSTEM_PROMPT,
    normalize=lambda raw, _ids: normalizer.normalize_program_template(raw),
    max_output_tokens=4000,
)

TUTORIALS = StageSpec(
    name="tutorials",
    model=TutorialBatch,
    system_prompt=TUTORIAL_SYSTEM_PROMPT,
    normalize=lambda raw, _ids: normalizer.normalize_tutorials(raw),
    max_output_tokens=6000,
    light=True,
)

ALL_STAGES = (
    BLUEPRINT,
    WORKOUT_DETAILS,
    RECOVERY_DETAILS,
    COACH_NOTES,
    PLAN_DETAILS,
    TEMPLATE_SKELETON,
    TUTORIALS,
)

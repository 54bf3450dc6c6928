from .blueprint import BLUEPRINT_SYSTEM_PROMPT, build_blueprint_prompt
from .coaching import (
    CHECK_IN_SYSTEM_PROMPT,
    COACH_HINT_SYSTEM_PROMPT,
    build_check_in_prompt,
    build_coach_hint_prompt,
)
from .details import (
    COACH_NOTES_SYSTEM_PROMPT,
    PLAN_DETAILS_SYSTEM_PROMPT,
    RECOVERY_DETAILS_SYSTEM_PROMPT,
    WORKOUT_DETAILS_SYSTEM_PROMPT,
    build_coach_notes_prompt,
    build_plan_details_prompt,
    build_recovery_details_prompt,
    build_workout_details_prompt,
)
from .template import (
    SKELETON_SYSTEM_PROMPT,
    TUTORIAL_SYSTEM_PROMPT,
    build_skeleton_prompt,
    build_tutorial_prompt,
)

__all__ = [
    "BLUEPRINT_SYSTEM_PROMPT",
    "CHECK_IN_SYSTEM_PROMPT",
    "COACH_HINT_SYSTEM_PROMPT",
    "COACH_NOTES_SYSTEM_PROMPT",
    "PLAN_DETAILS_SYSTEM_PROMPT",
    "RECOVERY_DETAILS_SYSTEM_PROMPT",
    "SKELETON_SYSTEM_PROMPT",
    "TUTORIAL_SYSTEM_PROMPT",
    "WORKOUT_DETAILS_SYSTEM_PROMPT",
    "build_blueprint_prompt",
    "build_check_in_prompt",
    "build_coach_hint_prompt",
    "build_coach_notes_prompt",
    "build_plan_details_prompt",
    "build_recovery_details_prompt",
    "build_skeleton_prompt",
    "build_tutorial_prompt",
    "build_workout_details_prompt",
]

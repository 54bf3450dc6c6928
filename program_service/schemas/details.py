from __future__ import annotations

from pydantic import Field, RootModel, ValidationInfo, model_validator

from .common import StrictCamelModel

RECOVERY_MIN_STEPS = 3
RECOVERY_MAX_STEPS = 5


def _check_expected_keys(keys: set[str], info: ValidationInfo) -> None:
    expected = (info.context or {}).get("expected_day_type_ids")
    if not expected:
        return
    missing = sorted(set(expected) - keys)
    if missing:
        raise ValueError(f"missing details for dayTypeId(s): {', '.join(missing)}")


class DetailExercise(StrictCamelModel):
    name: str
    equipment: str
    sets: int = Field(ge=1)
    reps: str
    rest_seconds: int = Field(ge=30)
    tempo: str | None = None
    how_to: str
    cues: list[str]
    common_mistakes: list[str]
    progression_tips: list[str]


class ExerciseBlock(StrictCamelModel):
    title: str
    exercises: list[DetailExercise]


class Warmup(StrictCamelModel):
    description: str
    steps: list[str]


class CardioProtocol(StrictCamelModel):
    is_included: bool
    description: str
    example_sessions: list[str]


class RecoveryRoutine(StrictCamelModel):
    is_recovery_day: bool
    description: str
    steps: list[str]
    extra_tips: list[str]


class DayTypeDetail(StrictCamelModel):
    name: str
    training_focus: str | None = None
    warmup: Warmup | None = None
    blocks: list[ExerciseBlock] = Field(default_factory=list)
    cardio_protocol: CardioProtocol | None = None
    recovery_routine: RecoveryRoutine | None = None


class WorkoutDayDetail(DayTypeDetail):
    training_focus: str
    warmup: Warmup
    blocks: list[ExerciseBlock]


class RecoveryDayDetail(DayTypeDetail):
    recovery_routine: RecoveryRoutine

    @model_validator(mode="after")
    def _check_step_count(self) -> RecoveryDayDetail:
        count = len(self.recovery_routine.steps)
        if not RECOVERY_MIN_STEPS <= count <= RECOVERY_MAX_STEPS:
            raise ValueError(
                f"recoveryRoutine.steps must have {RECOVERY_MIN_STEPS}-{RECOVERY_MAX_STEPS} blocks, got {count}"
            )
        return self


class WorkoutDetailsMap(RootModel[dict[str, WorkoutDayDetail]]):
    @model_validator(mode="after")
    def _check_coverage(self, info: ValidationInfo) -> WorkoutDetailsMap:
        _check_expected_keys(set(self.root), info)
        return self


class RecoveryDetailsMap(RootModel[dict[str, RecoveryDayDetail]]):
    @model_validator(mode="after")
    def _check_coverage(self, info: ValidationInfo) -> RecoveryDetailsMap:
        _check_expected_keys(set(self.root), info)
        return self


class PhaseBreakdown(StrictCamelModel):
    phase_name: str
    weeks: str
    focus: str
    notes: str


class CoachNotes(StrictCamelModel):
    how_this_program_works: str
    phase_breakdown: list[PhaseBreakdown] = Field(min_length=1)
    how_to_progress: str
    recovery_philosophy: str
    cardio_and_conditioning_approach: str
    nutrition_strategy: str


class PlanDetails(StrictCamelModel):
    day_type_details: dict[str, DayTypeDetail]
    global_coach_notes: CoachNotes

    @model_validator(mode="after")
    def _check_coverage(self, info: ValidationInfo) -> PlanDetails:
        _check_expected_keys(set(self.day_type_details), info)
        return self

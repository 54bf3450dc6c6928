"""Pure assembly of a 90-day Program from a blueprint and its generated details.

No I/O and no clock reads: the same inputs always produce the same document.
"""

from __future__ import annotations

from datetime import date

from ..exceptions import CompositionError
from ..schemas.assessment import Assessment
from ..schemas.blueprint import PROGRAM_LENGTH_DAYS, DayType, MicrocycleDay, PlanBlueprint
from ..schemas.details import DayTypeDetail, PlanDetails
from ..schemas.program import Program, ScheduledExercise, ScheduledWorkout
from ..schemas.template import (
    AssembledTemplate,
    DailyMacroTargets,
    ExerciseTutorial,
    TemplateExercise,
    TemplateMeta,
    TemplateNutrition,
    TemplateRecovery,
    TemplateWorkout,
    TrainingDay,
)
from .normalizer import FALLBACK_HOW_TO
from .program_calendar import scheduled_date, template_day_index

DEFAULT_REST = "60s"
MIN_ESTIMATED_MINUTES = 30


def estimated_duration_minutes(exercise_count: int) -> int:
    return max(MIN_ESTIMATED_MINUTES, exercise_count * 5 + 10)


def _workout_notes(detail: DayTypeDetail) -> str:
    notes = detail.training_focus or ""
    if detail.warmup and detail.warmup.description:
        notes = f"Warmup: {detail.warmup.description}\n\n{notes}"
    if detail.cardio_protocol and detail.cardio_protocol.is_included:
        notes += f"\n\nCardio: {detail.cardio_protocol.description}"
    return notes


def _template_exercises(detail: DayTypeDetail) -> list[TemplateExercise]:
    return [
        TemplateExercise(
            name=exercise.name,
            sets=exercise.sets,
            reps=exercise.reps,
            rest_seconds=exercise.rest_seconds,
            equipment=exercise.equipment,
            tempo=exercise.tempo,
            tutorial=ExerciseTutorial(
                how_to=exercise.how_to,
                cues=list(exercise.cues),
                common_mistakes=list(exercise.common_mistakes),
                progression_tips=list(exercise.progression_tips),
            ),
        )
        for block in detail.blocks
        for exercise in block.exercises
    ]


def _training_day(slot: MicrocycleDay, day_type: DayType, detail: DayTypeDetail) -> TrainingDay:
    common = dict(
        day_index=slot.day_index,
        is_workout_day=not day_type.is_recovery_day,
        label=day_type.label,
        focus=day_type.focus_description,
        day_type_id=day_type.id,
        category=day_type.category,
    )
    if day_type.is_recovery_day:
        routine = detail.recovery_routine
        return TrainingDay(
            **common,
            recovery=TemplateRecovery(
                suggestions=list(routine.steps) if routine else [],
                description=routine.description if routine else None,
                extra_tips=list(routine.extra_tips) if routine else None,
            ),
        )

    exercises = _template_exercises(detail)
    return TrainingDay(
        **common,
        workout=TemplateWorkout(
            estimated_duration_minutes=estimated_duration_minutes(len(exercises)),
            notes=_workout_notes(detail),
            warmup=detail.warmup,
            cardio_protocol=detail.cardio_protocol,
            exercises=exercises,
        ),
    )


def build_training_template(blueprint: PlanBlueprint, details: PlanDetails) -> list[TrainingDay]:
    """Join the microcycle template with the day-type catalog and the detail map.

    Raises ``CompositionError`` when a referenced day type has no catalog entry or
    no generated detail; a partially populated template is never returned.
    """
    training: list[TrainingDay] = []
    for slot in sorted(blueprint.split_design.microcycle_template, key=lambda s: s.day_index):
        day_type = blueprint.day_type(slot.day_type_id)
        if day_type is None:
            raise CompositionError(f"Template day {slot.day_index} references unknown dayTypeId '{slot.day_type_id}'")
        detail = details.day_type_details.get(slot.day_type_id)
        if detail is None:
            raise CompositionError(f"No generated details for dayTypeId '{slot.day_type_id}'")
        training.append(_training_day(slot, day_type, detail))
    return training


def _scheduled_exercises(day: TrainingDay) -> list[ScheduledExercise]:
    return [
        ScheduledExercise(
            name=exercise.name,
            sets=exercise.sets,
            reps=exercise.reps,
            rest=f"{exercise.rest_seconds}s" if exercise.rest_seconds else DEFAULT_REST,
            equipment=exercise.equipment,
            tutorial=exercise.tutorial or ExerciseTutorial(how_to=FALLBACK_HOW_TO, cues=[], common_mistakes=[]),
        )
        for exercise in day.exercises()
    ]


def project_workouts(
    template: AssembledTemplate,
    start_date: date,
    *,
    program_length_days: int = PROGRAM_LENGTH_DAYS,
) -> list[ScheduledWorkout]:
    workouts: list[ScheduledWorkout] = []
    for day_number in range(1, program_length_days + 1):
        day = template.day(template_day_index(day_number, program_length_days=program_length_days))
        if day is None or not day.is_workout_day or day.workout is None:
            continue
        workouts.append(
            ScheduledWorkout(
                id=f"day-{day_number}",
                day=day_number,
                name=day.label,
                focus=day.focus,
                scheduled_date=scheduled_date(start_date, day_number),
                exercises=_scheduled_exercises(day),
            )
        )
    return workouts


def assemble(
    blueprint: PlanBlueprint,
    details: PlanDetails,
    assessment: Assessment,
    start_date: date,
) -> Program:
    overview = blueprint.program_overview
    macros = blueprint.nutrition_overview.daily_macros
    coach_notes = details.global_coach_notes

    template = AssembledTemplate(
        meta=TemplateMeta(
            goal=overview.primary_goal,
            days_per_week=blueprint.user_profile.training_days_per_week,
            minutes_per_workout=blueprint.user_profile.session_length_minutes,
            summary=overview.summary,
            description=overview.title,
        ),
        training=build_training_template(blueprint, details),
        nutrition=TemplateNutrition(
            daily_macro_targets=DailyMacroTargets(
                calories=macros.calories,
                protein_grams=macros.protein_grams,
                carbs_grams=macros.carbs_grams,
                fats_grams=macros.fats_grams,
                notes=coach_notes.nutrition_strategy or "\n".join(blueprint.nutrition_overview.guidelines),
            )
        ),
        coach_notes=coach_notes,
    )

    return Program(
        program_length_days=PROGRAM_LENGTH_DAYS,
        start_date=start_date,
        template=template,
        workouts=project_workouts(template, start_date),
        goals=list(assessment.goals),
        weekly_days=assessment.weekly_days,
    )

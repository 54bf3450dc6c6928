from __future__ import annotations

from collections.abc import Sequence
from textwrap import dedent

from ..schemas.assessment import DEFAULT_ACTIVITY_LEVEL, DEFAULT_DAILY_MINUTES, DEFAULT_EXPERIENCE, Assessment
from ..schemas.blueprint import PlanBlueprint
from .profile import body_summary_line, format_json, format_lines, full_profile_lines

_EXERCISE_SHAPE = """\
{
  "name": string,
  "equipment": string,
  "sets": number,
  "reps": string (e.g. "6-8", "8-12"),
  "restSeconds": number (30 or more),
  "tempo": string (optional),
  "howTo": string (multi-step explanation, 3-6 steps),
  "cues": string[] (3-6 specific cues),
  "commonMistakes": string[] (3-5 detailed mistakes),
  "progressionTips": string[] (2-4 tips)
}"""

_COACH_NOTES_SHAPE = """\
{
  "howThisProgramWorks": string (2-4 paragraphs explaining the program philosophy),
  "phaseBreakdown": [
    {"phaseName": string, "weeks": string (e.g. "Weeks 1-4"), "focus": string, "notes": string}
  ] (typically 3 phases for 90 days),
  "howToProgress": string (2-3 paragraphs on progression strategy),
  "recoveryPhilosophy": string (1-2 paragraphs),
  "cardioAndConditioningApproach": string (1-2 paragraphs),
  "nutritionStrategy": string (2-3 paragraphs expanding on blueprint nutrition)
}"""

WORKOUT_DETAILS_SYSTEM_PROMPT = format_lines(
    [
        dedent(
            """
            You are an expert strength & conditioning coach.

            Generate DETAILED workout content for specific day types from a program blueprint.
            CRITICAL: The blueprint structure is ALREADY DECIDED. You must STRICTLY FOLLOW it.

            Return one JSON object keyed by dayTypeId. Each value:
            {
              "name": string (matches blueprint label),
              "trainingFocus": string (1-2 sentences),
              "warmup": {"description": string, "steps": string[] (3-6 detailed steps)},
              "blocks": [{"title": string (e.g. "Main Lifts", "Accessories", "Finisher"), "exercises": Exercise[]}],
              "cardioProtocol": {"isIncluded": boolean, "description": string, "exampleSessions": string[]}
                (only if the day type includesCardio)
            }

            Exercise:
            """
        ).strip(),
        _EXERCISE_SHAPE,
        dedent(
            """
            WORKOUT STRUCTURE:
            - Create appropriate blocks: Main Lifts, Accessories, Finisher (optional).
            - Exercise volume should match sessionLengthMinutes from the blueprint.
            - Include a warmup routine specific to the day's focus.
            - Cues must be specific and actionable, not vague ones like "engage core".

            Return JSON ONLY, no markdown, no backticks.
            """
        ).strip(),
    ]
)

RECOVERY_DETAILS_SYSTEM_PROMPT = dedent(
    """
    You are an expert strength & conditioning coach specialising in recovery and mobility.

    Generate DETAILED recovery routines for specific recovery day types from a program blueprint.

    Return one JSON object keyed by dayTypeId. Each value:
    {
      "name": string (matches blueprint label),
      "recoveryRoutine": {
        "isRecoveryDay": true,
        "description": string (overview),
        "steps": string[] (3-5 detailed recovery blocks, each as a complete sentence),
        "extraTips": string[] (2-3 additional tips)
      }
    }

    RECOVERY ROUTINE REQUIREMENTS:
    - Each step is a complete block, e.g. "Block 1 - 10-min hip mobility: 2 rounds of 30s couch stretch per side,
      30s 90/90 hip switches, 30s deep squat hold".
    - 3-5 such blocks per recovery day.
    - Tailor to the user's injuries, priority areas, and activity level.

    Return JSON ONLY, no markdown, no backticks.
    """
).strip()

COACH_NOTES_SYSTEM_PROMPT = format_lines(
    [
        "You are an expert strength & conditioning coach and sports nutritionist.",
        "Generate comprehensive coach-style notes and guidance for a 90-day training program.",
        "Return JSON with this structure:",
        _COACH_NOTES_SHAPE,
        dedent(
            """
            COACH NOTES REQUIREMENTS:
            - Write in a coach-like, personalized tone.
            - Reference the user's specific goals, experience, equipment, and injuries.
            - Expand on the blueprint nutrition overview: explain WHY the macros were chosen and give meal timing guidance.

            Return JSON ONLY, no markdown, no backticks.
            """
        ).strip(),
    ]
)

PLAN_DETAILS_SYSTEM_PROMPT = format_lines(
    [
        dedent(
            """
            You are an expert strength & conditioning coach and sports nutritionist.

            Generate DETAILED workout content, recovery routines and coaching notes for a pre-designed
            program blueprint. Do NOT change day type ids, labels, categories or the microcycle template.

            JSON STRUCTURE REQUIRED:
            {
              "dayTypeDetails": {
                "[dayTypeId]": {
                  "name": string,
                  "trainingFocus": string (workout day types),
                  "warmup": {"description": string, "steps": string[]} (workout day types),
                  "blocks": [{"title": string, "exercises": Exercise[]}] (workout day types),
                  "cardioProtocol": {"isIncluded": boolean, "description": string, "exampleSessions": string[]}
                    (only if includesCardio),
                  "recoveryRoutine": {"isRecoveryDay": true, "description": string, "steps": string[] (3-5),
                    "extraTips": string[]} (only for recovery day types)
                }
              },
              "globalCoachNotes": CoachNotes
            }

            Exercise:
            """
        ).strip(),
        _EXERCISE_SHAPE,
        "CoachNotes:",
        _COACH_NOTES_SHAPE,
        "Return JSON ONLY, no markdown, no backticks.",
    ]
)


def _requested_day_types(blueprint: PlanBlueprint, day_type_ids: Sequence[str], *fields: str) -> list[dict]:
    wanted = set(day_type_ids)
    return [
        {field: getattr(day_type, field) for field in fields}
        for day_type in blueprint.split_design.day_types
        if day_type.id in wanted
    ]


def _camel(fields: list[dict]) -> list[dict]:
    renames = {"is_recovery_day": "isRecoveryDay", "includes_cardio": "includesCardio"}
    return [{renames.get(key, key): value for key, value in item.items()} for item in fields]


def build_workout_details_prompt(
    *,
    assessment: Assessment,
    blueprint: PlanBlueprint,
    day_type_ids: Sequence[str],
) -> str:
    """Compose the user prompt for one batch of workout day types."""
    excerpt = {
        "dayTypes": _camel(
            _requested_day_types(blueprint, day_type_ids, "id", "label", "category", "includes_cardio")
        ),
        "sessionLengthMinutes": blueprint.user_profile.session_length_minutes,
    }
    profile = format_lines(
        [
            "User profile:",
            f"- Training experience: {assessment.training_experience or DEFAULT_EXPERIENCE}",
            f"- Minutes per workout: {assessment.daily_minutes or DEFAULT_DAILY_MINUTES}",
            f"- Equipment: {assessment.equipment_description}",
            f"- Injuries: {assessment.injuries_or_pain or 'none'}",
            f"- Priority areas: {assessment.priority_areas or 'none'}",
        ]
    )
    return "\n\n".join(
        [
            profile,
            "PROGRAM BLUEPRINT (generate details ONLY for these day types):\n" + format_json(excerpt),
            f"Generate detailed workout content for exactly these dayTypeIds: {', '.join(day_type_ids)}. "
            "Return a JSON object keyed by dayTypeId.",
        ]
    )


def build_recovery_details_prompt(
    *,
    assessment: Assessment,
    blueprint: PlanBlueprint,
    day_type_ids: Sequence[str],
) -> str:
    excerpt = {"dayTypes": _requested_day_types(blueprint, day_type_ids, "id", "label")}
    profile = format_lines(
        [
            "User profile:",
            f"- Injuries: {assessment.injuries_or_pain or 'none'}",
            f"- Priority areas: {assessment.priority_areas or 'none'}",
            f"- Activity level: {assessment.activity_level or DEFAULT_ACTIVITY_LEVEL}",
        ]
    )
    return "\n\n".join(
        [
            profile,
            "PROGRAM BLUEPRINT (generate recovery routines ONLY for these day types):\n" + format_json(excerpt),
            f"Generate detailed recovery routines for exactly these dayTypeIds: {', '.join(day_type_ids)}. "
            "Return a JSON object keyed by dayTypeId.",
        ]
    )


def build_coach_notes_prompt(*, assessment: Assessment, blueprint: PlanBlueprint) -> str:
    excerpt = {
        "programOverview": blueprint.program_overview.to_wire(),
        "splitDesign": {
            "dayTypes": _requested_day_types(
                blueprint,
                [day_type.id for day_type in blueprint.split_design.day_types],
                "id",
                "label",
                "category",
            )
        },
        "nutritionOverview": blueprint.nutrition_overview.to_wire(),
    }
    profile = format_lines(
        [
            "User profile:",
            body_summary_line(assessment),
            f"- Goal: {assessment.goal_text}",
            f"- Training experience: {assessment.training_experience or DEFAULT_EXPERIENCE}",
            f"- Injuries: {assessment.injuries_or_pain or 'none'}",
            f"- Priority areas: {assessment.priority_areas or 'none'}",
            f"- Activity level: {assessment.activity_level or DEFAULT_ACTIVITY_LEVEL}",
        ]
    )
    return "\n\n".join(
        [
            profile,
            "PROGRAM BLUEPRINT:\n" + format_json(excerpt),
            "Generate comprehensive coach notes and guidance based on this blueprint and user profile.",
        ]
    )


def build_plan_details_prompt(
    *,
    assessment: Assessment,
    blueprint: PlanBlueprint,
    day_type_ids: Sequence[str],
) -> str:
    """Compose the single-call prompt producing details for ``day_type_ids`` plus coach notes."""
    profile = blueprint.user_profile
    excerpt = {
        "splitDesign": {
            "dayTypes": _camel(
                _requested_day_types(
                    blueprint, day_type_ids, "id", "label", "category", "is_recovery_day", "includes_cardio"
                )
            ),
            "microcycleTemplate": [day.to_wire() for day in blueprint.split_design.microcycle_template],
        },
        "userProfile": {
            "goal": profile.goal,
            "trainingDaysPerWeek": profile.training_days_per_week,
            "sessionLengthMinutes": profile.session_length_minutes,
            "equipmentAccess": profile.equipment_access,
            "injuries": profile.injuries,
            "experienceLevel": profile.experience_level,
        },
    }
    return "\n\n".join(
        [
            "User profile:\n" + format_lines(full_profile_lines(assessment)),
            "PROGRAM BLUEPRINT (YOU MUST FOLLOW THIS STRUCTURE):\n" + format_json(excerpt),
            format_lines(
                [
                    "Generate detailed workout content, exercise tutorials, recovery routines, and coach notes.",
                    f"dayTypeDetails keys must be exactly: {', '.join(day_type_ids)}.",
                    "Return the complete PlanDetails JSON structure.",
                ]
            ),
        ]
    )

from __future__ import annotations

from collections.abc import Sequence
from textwrap import dedent

from ..schemas.assessment import DEFAULT_EXPERIENCE, Assessment
from ..schemas.template import ExerciseRef
from .profile import body_summary_line, format_lines, full_profile_lines

SKELETON_SYSTEM_PROMPT = dedent(
    """
    You are an expert strength & conditioning coach and sports nutritionist.

    Your job:
    Design a realistic, highly personalized 14-day (2-week) training and nutrition template
    that will be repeated over ~90 days. Return it in a strict JSON format.

    This is PHASE 1 - structure only. Do NOT include tutorials yet.

    GENERAL JSON RULES
    - Respond with JSON ONLY, no extra text, no backticks.
    - The root object must have: meta, training (14 days), nutrition.
    - meta: {goal: string, daysPerWeek: number (2-6), minutesPerWorkout: number, summary: string, description: string}
    - training must be an array of exactly 14 DayPlan objects:
      - dayIndex: 1-14
      - isWorkoutDay: boolean
      - label: string
      - focus: string
      - IF isWorkoutDay: workout: {estimatedDurationMinutes: number, notes: string (2-3 sentences), exercises: Exercise[]}
      - IF NOT isWorkoutDay: recovery: {suggestions: string[] (3-5 items, each describing a recovery block)}
    - Each Exercise: {name: string, sets: number, reps: string, restSeconds: number, equipment: string}
    - nutrition.dailyMacroTargets: calories, proteinGrams, carbsGrams, fatsGrams, notes (brief explanation).

    WORKOUT VOLUME
    - minutesPerWorkout >= 60: 5-7 exercises; 45-59: 4-6 exercises; 30-44: 3-5 exercises.
    - Each workout day: 1 main compound movement, 2-4 accessories, and 1 mobility or conditioning block.
    - For fat loss or "getting lean" goals include 1-3 cardio/conditioning sessions or blocks per week.

    PERSONALIZATION
    - Respect injuriesOrPain, equipment, priorityAreas and activityLevel.
    - Use descriptive day labels like "Glute-Biased Lower", "Posture & Upper Back", "Cardio + Core".
    - In workout.notes explain how the session supports the goal and how to progress over the 90 days.

    NUTRITION
    - Estimate maintenance from age, sex, height, weight and activityLevel.
    - Muscle gain: 5-15% above maintenance. Fat loss: 15-25% below. Otherwise near maintenance.
    - Protein 0.8-1.0 g per pound of bodyweight, fats at least 0.3 g per pound, carbs fill the rest.
    - dailyMacroTargets.notes explains why these numbers were chosen (2-3 sentences).
    """
).strip()

TUTORIAL_SYSTEM_PROMPT = dedent(
    """
    You are an expert strength & conditioning coach.

    Your job:
    Generate detailed, personalized exercise tutorials for a specific user.
    This is PHASE 2 - tutorials only. You will receive a list of exercises and a user profile.

    GENERAL JSON RULES
    - Respond with JSON ONLY, no extra text, no backticks.
    - Root object: { "tutorials": EnrichedTutorial[] }
    - EnrichedTutorial: {"dayIndex": number, "exerciseIndex": number,
      "tutorial": {"howTo": string, "cues": string[], "commonMistakes": string[]}}
    - dayIndex and exerciseIndex must be copied from the exercise list.

    TUTORIAL QUALITY
    - howTo: 2-4 dense sentences covering setup, position, movement path, breathing, safety.
    - cues: 3-4 vivid, specific cues. Avoid shallow cues like "engage core" as the only advice.
    - commonMistakes: 3 short sentences (mistake + what to do instead).
    - Adjust for the user's experience level, injuries, priority areas and equipment.
    """
).strip()


def build_skeleton_prompt(*, assessment: Assessment) -> str:
    """Compose the user prompt for the 14-day template skeleton."""
    return format_lines(
        [
            "User profile for training and nutrition:",
            format_lines(full_profile_lines(assessment)),
            "Generate the 14-day plan structure. Do NOT include tutorial fields in exercises.",
        ]
    )


def build_tutorial_prompt(*, assessment: Assessment, exercises: Sequence[ExerciseRef]) -> str:
    exercise_list = format_lines(
        [
            f"- dayIndex {ref.day_index}, exerciseIndex {ref.exercise_index} ({ref.label} - {ref.focus}): "
            f"{ref.name} (Equipment: {ref.equipment})"
            for ref in exercises
        ]
    )
    profile = format_lines(
        [
            "User profile:",
            body_summary_line(assessment),
            f"- Goal: {assessment.goal_text}",
            f"- Training experience: {assessment.training_experience or DEFAULT_EXPERIENCE}",
            f"- Injuries or pain: {assessment.injuries_or_pain or 'none'}",
            f"- Priority areas: {assessment.priority_areas or 'none'}",
            f"- Available equipment: {assessment.equipment_description}",
        ]
    )
    return "\n\n".join(
        [
            profile,
            "Exercises to create tutorials for:\n" + exercise_list,
            "For each exercise, provide a detailed tutorial personalized to this user's profile, "
            "experience level, and any injuries or limitations.",
        ]
    )

from __future__ import annotations

from textwrap import dedent

from ..schemas.assessment import Assessment
from .profile import format_lines, full_profile_lines

BLUEPRINT_SYSTEM_PROMPT = dedent(
    """
    You are an expert strength & conditioning coach.

    Your job:
    Design a COMPACT structural blueprint for a 90-day training program based on a 2-week (14-day)
    microcycle that repeats.

    CRITICAL: Return ONLY the structural blueprint in JSON format. NO long-form coaching content,
    NO detailed exercise descriptions, NO essays. Keep all text fields SHORT and STRUCTURAL.

    JSON STRUCTURE REQUIRED:
    {
      "userProfile": {
        "goal": string,
        "trainingDaysPerWeek": number (2-6),
        "sessionLengthMinutes": number (15 or more),
        "cardioPreference": string (optional),
        "equipmentAccess": string,
        "injuries": string[] (optional),
        "experienceLevel": "beginner" | "intermediate" | "advanced",
        "bodyGoals": string[] (optional),
        "age": number (optional),
        "gender": "male" | "female" | "other" (optional),
        "height_cm": number (optional),
        "weight_kg": number (optional),
        "activityLevel": string (optional),
        "priorityAreas": string (optional)
      },
      "programOverview": {
        "title": string (short, e.g. "Lean Strength Builder"),
        "primaryGoal": string (one sentence),
        "secondaryGoals": string[] (2-3 short goals),
        "summary": string (2-4 sentences MAX, under 500 characters)
      },
      "splitDesign": {
        "microcycleLengthDays": 14,
        "dayTypes": [
          {
            "id": string (e.g. "upper_a", "lower_a", "cardio_a", "recovery_a"),
            "label": string (e.g. "Upper Strength A"),
            "category": "strength" | "hypertrophy" | "conditioning" | "recovery",
            "focusDescription": string (1-2 sentences MAX, under 200 characters),
            "includesCardio": boolean,
            "isRecoveryDay": boolean
          }
        ],
        "microcycleTemplate": [
          {"dayIndex": number (1-14), "dayTypeId": string (references dayTypes.id)}
        ],
        "programLengthDays": 90
      },
      "nutritionOverview": {
        "dailyMacros": {"calories": number, "proteinGrams": number, "carbsGrams": number, "fatsGrams": number},
        "sampleMeals": [{"name": string, "description": string (one sentence MAX)}] (max 5 meals),
        "guidelines": string[] (short bullets, max 8, each max 150 chars)
      }
    }

    RULES:
    - Keep ALL text fields SHORT. No essays, no long paragraphs.
    - microcycleTemplate must contain exactly 14 entries, one per dayIndex 1..14.
    - Every dayTypeId in microcycleTemplate must reference an id declared in dayTypes.
    - Include appropriate day types based on goal:
      - Strength days for strength goals
      - Hypertrophy days for muscle gain
      - Conditioning days if goal includes "get lean" or fat loss
      - Recovery days (at least 1-2 per 14 days, with isRecoveryDay: true)
    - For "get lean" goals, integrate conditioning/cardio (1-3 sessions per week).
    - Map the 14-day template to the user's trainingDaysPerWeek.
    - Calculate macros based on age, weight, height, gender, activityLevel, and goal.
    - Return JSON ONLY, no markdown, no backticks.
    """
).strip()


def build_blueprint_prompt(*, assessment: Assessment) -> str:
    """Compose the user prompt for the blueprint stage."""
    return format_lines(
        [
            "User profile for training program blueprint:",
            format_lines(full_profile_lines(assessment)),
            "Generate a COMPACT structural blueprint only. Return the JSON object matching the required structure.",
        ]
    )

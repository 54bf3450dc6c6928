from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from ..schemas.assessment import (
    DEFAULT_ACTIVITY_LEVEL,
    DEFAULT_AGE,
    DEFAULT_DAILY_MINUTES,
    DEFAULT_EXPERIENCE,
    DEFAULT_GENDER,
    DEFAULT_HEIGHT_CM,
    DEFAULT_WEEKLY_DAYS,
    DEFAULT_WEIGHT_KG,
    Assessment,
)


def _number(value: float | int) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


def format_lines(lines: Sequence[str]) -> str:
    return "\n".join(str(line) for line in lines if line)


def format_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def full_profile_lines(assessment: Assessment) -> list[str]:
    """Every assessment answer, with documented defaults for the ones left blank."""
    lines = [
        f"- Age: {assessment.age or DEFAULT_AGE}",
        f"- Sex: {assessment.gender or DEFAULT_GENDER}",
        f"- Height: {_number(assessment.height_cm or DEFAULT_HEIGHT_CM)} cm",
        f"- Weight: {_number(assessment.weight_kg or DEFAULT_WEIGHT_KG)} kg",
        f"- Goal: {assessment.goal_text}",
        f"- Training experience: {assessment.training_experience or DEFAULT_EXPERIENCE}",
        f"- Days per week available to train: {assessment.weekly_days or DEFAULT_WEEKLY_DAYS}",
        f"- Minutes available per workout: {assessment.daily_minutes or DEFAULT_DAILY_MINUTES}",
        f"- Daily activity level: {assessment.activity_level or DEFAULT_ACTIVITY_LEVEL}",
        f"- Available equipment: {assessment.equipment_description}",
        f"- Injuries or pain: {assessment.injuries_or_pain or 'none'}",
        f"- Priority areas: {assessment.priority_areas or 'none'}",
    ]
    if assessment.goal_description:
        lines.append(f"- Goal description: {assessment.goal_description}")
    if assessment.available_days:
        lines.append(f"- Preferred training days: {', '.join(assessment.available_days)}")
    return lines


def body_summary_line(assessment: Assessment) -> str:
    return (
        f"- Age: {assessment.age or DEFAULT_AGE}, Sex: {assessment.gender or DEFAULT_GENDER}, "
        f"Height: {_number(assessment.height_cm or DEFAULT_HEIGHT_CM)} cm, "
        f"Weight: {_number(assessment.weight_kg or DEFAULT_WEIGHT_KG)} kg"
    )

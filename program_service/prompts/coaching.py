from __future__ import annotations

from ..schemas.coaching import CoachCheckInRequest, CoachHintRequest

CHECK_IN_SYSTEM_PROMPT = (
    "You are a supportive, encouraging personal trainer. "
    "Provide brief, actionable coaching responses (1-2 sentences). Be warm and motivating."
)

COACH_HINT_SYSTEM_PROMPT = (
    "You are a supportive coach. Provide exactly one sentence of feedback. Be concise and actionable."
)

TONE_DESCRIPTIONS = {
    "encouraging": "warm and supportive",
    "motivational": "energetic and inspiring",
    "analytical": "fact-based and constructive",
}

_CHECK_IN_OPENERS = {
    "pre": "The user is about to start their workout and shared this:",
    "post": "The user just finished their workout and shared this:",
}

_CHECK_IN_ASKS = {
    "pre": "Provide a brief, encouraging pre-workout message (1-2 sentences) to motivate them and give one helpful tip.",
    "post": (
        "Provide a brief, supportive post-workout message (1-2 sentences) "
        "acknowledging their effort and giving one recovery tip."
    ),
}


def build_check_in_prompt(request: CoachCheckInRequest) -> str:
    lines = [_CHECK_IN_OPENERS[request.type], f'"{request.user_message}"']
    context = request.context
    if context and context.day_number:
        lines.append(f"This is day {context.day_number} of their 90-day program.")
    if context and context.workout_name:
        lines.append(f"Workout: {context.workout_name}")
    lines += ["", _CHECK_IN_ASKS[request.type]]
    return "\n".join(lines)


def build_coach_hint_prompt(request: CoachHintRequest) -> str:
    tone = TONE_DESCRIPTIONS[request.tone]
    return "\n".join(
        [
            f"Generate a {tone} one-sentence coach hint based on:",
            "",
            f"- Current streak: {request.streak_days} days",
            f"- On-time completion rate: {request.on_time_percentage:.0f}%",
            f"- Weekly completion rate: {request.completion_rate:.0f}%",
            f"- Recent activity: {request.recent_checkins} tasks completed in last 7 days",
            "",
            f"Provide exactly one sentence that is actionable and {tone}.",
        ]
    )

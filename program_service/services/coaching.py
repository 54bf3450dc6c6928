from __future__ import annotations

import asyncio

import structlog

from ..config import PipelineConfig
from ..exceptions import CompletionError
from ..metrics import COACH_REPLIES_TOTAL
from ..prompts import (
    CHECK_IN_SYSTEM_PROMPT,
    COACH_HINT_SYSTEM_PROMPT,
    build_check_in_prompt,
    build_coach_hint_prompt,
)
from ..schemas.coaching import CoachCheckInRequest, CoachHintRequest
from .completion import TextCompletion

logger = structlog.get_logger(__name__)

CHECK_IN_MAX_OUTPUT_TOKENS = 150
HINT_MAX_OUTPUT_TOKENS = 100

CHECK_IN_FALLBACKS = {
    "pre": (
        "Great! Stay focused and give it your best effort today. "
        "Remember to warm up properly and listen to your body."
    ),
    "post": "Well done! Recovery is just as important as training. Make sure to hydrate and get some rest.",
}

EMPTY_HINT = "Keep up the great work!"


def fallback_hint(request: CoachHintRequest) -> str:
    """Canned hint picked from the athlete's stats when the model is unavailable."""
    if request.streak_days >= 7:
        return "You're on fire! Keep this momentum going."
    if request.completion_rate >= 80:
        return "Great progress! You're staying consistent."
    if request.completion_rate < 50:
        return "Try to focus on completing at least one task per day to build momentum."
    return "Every step forward counts. Keep going!"


class CoachingService:
    """One-shot plain-text coaching replies. Never fails: provider trouble yields a canned reply."""

    def __init__(self, completion: TextCompletion, config: PipelineConfig | None = None):
        self.completion = completion
        self.config = config or PipelineConfig()

    async def _reply(self, kind: str, system_prompt: str, user_prompt: str, *, max_output_tokens: int) -> str | None:
        try:
            text = await asyncio.wait_for(
                self.completion.complete(
                    system_prompt,
                    user_prompt,
                    temperature=self.config.temperature,
                    max_output_tokens=max_output_tokens,
                    json_output=False,
                ),
                timeout=self.config.stage_timeout_seconds,
            )
        except (CompletionError, TimeoutError) as exc:
            COACH_REPLIES_TOTAL.labels(kind=kind, outcome="fallback").inc()
            logger.warning("coach_reply_fallback", kind=kind, error=str(exc) or type(exc).__name__)
            return None

        COACH_REPLIES_TOTAL.labels(kind=kind, outcome="generated").inc()
        return text.strip()

    async def check_in(self, request: CoachCheckInRequest) -> str:
        reply = await self._reply(
            "check_in",
            CHECK_IN_SYSTEM_PROMPT,
            build_check_in_prompt(request),
            max_output_tokens=CHECK_IN_MAX_OUTPUT_TOKENS,
        )
        return reply or CHECK_IN_FALLBACKS[request.type]

    async def coach_hint(self, request: CoachHintRequest) -> str:
        reply = await self._reply(
            "hint",
            COACH_HINT_SYSTEM_PROMPT,
            build_coach_hint_prompt(request),
            max_output_tokens=HINT_MAX_OUTPUT_TOKENS,
        )
        if reply is None:
            return fallback_hint(request)
        return reply or EMPTY_HINT

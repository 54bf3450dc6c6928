from __future__ import annotations

import asyncio
import json
import re
from typing import Any

import structlog

from ..exceptions import EmptyResponseError, ResponseParseError, TransportError
from .completion import TextCompletion

logger = structlog.get_logger(__name__)

_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)
_PREVIEW_CHARS = 500


def strip_code_fences(text: str) -> str:
    text = text.strip()
    match = _FENCE.match(text)
    return match.group(1).strip() if match else text


def parse_json_payload(text: str) -> Any:
    """Parse completion text as JSON.

    Tolerates markdown fences and prose around a single top-level object; raises
    ``EmptyResponseError`` or ``ResponseParseError`` otherwise.
    """
    if not text or not text.strip():
        raise EmptyResponseError("Empty completion text")

    candidate = strip_code_fences(text)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        start = candidate.find("{")
        end = candidate.rfind("}")
        if start != -1 and end > start:
            try:
                return json.loads(candidate[start : end + 1])
            except json.JSONDecodeError:
                pass
        preview = candidate[:_PREVIEW_CHARS]
        raise ResponseParseError(f"Completion is not valid JSON: {exc}", preview=preview) from exc


class StageClient:
    """Calls the completion seam with a per-call time limit and returns parsed JSON."""

    def __init__(self, completion: TextCompletion, *, timeout_seconds: float):
        self.completion = completion
        self.timeout_seconds = timeout_seconds

    async def call(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> Any:
        try:
            text = await asyncio.wait_for(
                self.completion.complete(
                    system_prompt,
                    user_prompt,
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise TransportError(f"Completion timed out after {self.timeout_seconds:g}s") from exc

        try:
            return parse_json_payload(text)
        except ResponseParseError as exc:
            logger.warning("completion_parse_failed", error=str(exc), preview=exc.preview)
            raise

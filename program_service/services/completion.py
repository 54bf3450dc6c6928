from __future__ import annotations

import asyncio
import time
from collections import defaultdict, deque
from typing import Protocol

import httpx
import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import Settings
from ..exceptions import CompletionRefusedError, TransportError

logger = structlog.get_logger(__name__)

_RETRYABLE_STATUS = {408, 429}
_BLOCKED_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "RECITATION"}


class TextCompletion(Protocol):
    """Single text completion call. Implementations raise ``CompletionError`` subclasses."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_output_tokens: int,
        json_output: bool = True,
    ) -> str: ...


class SlidingWindowRateLimiter:
    def __init__(self, *, max_calls: int, window_seconds: float):
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._lock = asyncio.Lock()
        self._history: defaultdict[str, deque[float]] = defaultdict(deque)

    async def acquire(self, key: str) -> None:
        if self.max_calls <= 0:
            return

        while True:
            async with self._lock:
                history = self._history[key]
                now = time.monotonic()
                window_start = now - self.window_seconds

                while history and history[0] < window_start:
                    history.popleft()

                if len(history) < self.max_calls:
                    history.append(now)
                    return

                wait_seconds = self.window_seconds - (now - history[0])

            await asyncio.sleep(max(wait_seconds, 0.05))


def _status_of(exc: Exception) -> int | None:
    status = getattr(exc, "code", None) or getattr(exc, "status_code", None)
    return status if isinstance(status, int) else None


def classify_provider_error(exc: Exception) -> Exception:
    """Map a provider/SDK exception onto the pipeline's completion error taxonomy."""
    if isinstance(exc, (httpx.TimeoutException, httpx.TransportError, TimeoutError)):
        return TransportError(f"GenAI transport failure: {exc}")

    status = _status_of(exc)
    if isinstance(exc, genai_errors.ServerError) or (status is not None and status >= 500):
        return TransportError(f"GenAI server error: {exc}", status_code=status)
    if status in _RETRYABLE_STATUS:
        return TransportError(f"GenAI quota or rate limit: {exc}", status_code=status)
    if isinstance(exc, genai_errors.ClientError) or (status is not None and 400 <= status < 500):
        return CompletionRefusedError(f"GenAI rejected the request ({status}): {exc}")
    return exc


def _finish_reason_name(response: types.GenerateContentResponse) -> str | None:
    candidate = response.candidates[0] if getattr(response, "candidates", None) else None
    reason = getattr(candidate, "finish_reason", None)
    if reason is None:
        return None
    return getattr(reason, "name", None) or str(reason)


def _block_reason_name(response: types.GenerateContentResponse) -> str | None:
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None)
    if reason is None:
        return None
    return getattr(reason, "name", None) or str(reason)


class GenAITextCompletion:
    """Gemini-backed ``TextCompletion``; asks for a JSON body unless ``json_output`` is off."""

    def __init__(
        self,
        *,
        model: str,
        api_key: str | None,
        rate_limit_per_minute: int = 60,
        rate_limit_window_seconds: float = 60.0,
        concurrency: int = 8,
    ):
        self.model = model
        self._api_key = api_key
        self._client: genai.Client | None = None
        self._semaphore = asyncio.Semaphore(concurrency)
        self._rate_limiter = SlidingWindowRateLimiter(
            max_calls=rate_limit_per_minute,
            window_seconds=rate_limit_window_seconds,
        )

    @classmethod
    def from_settings(cls, source: Settings) -> GenAITextCompletion:
        if source.llm_provider != "gemini":
            raise RuntimeError(f"Unsupported LLM provider: {source.llm_provider}")
        return cls(
            model=source.staged_llm_model,
            api_key=source.genai_api_key,
            rate_limit_per_minute=source.genai_rate_limit_per_minute,
            rate_limit_window_seconds=source.genai_rate_limit_window_seconds,
            concurrency=source.genai_rate_limit_concurrency,
        )

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("GEMINI_API_KEY (or GOOGLE_API_KEY) must be set for plan generation")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_output_tokens: int,
        json_output: bool = True,
    ) -> str:
        client = self._get_client()

        try:
            async with self._semaphore:
                await self._rate_limiter.acquire(self.model)
                response = await asyncio.to_thread(
                    client.models.generate_content,
                    model=self.model,
                    contents=user_prompt,
                    config=types.GenerateContentConfig(
                        system_instruction=system_prompt,
                        response_mime_type="application/json" if json_output else "text/plain",
                        temperature=temperature,
                        max_output_tokens=max_output_tokens,
                    ),
                )
        except Exception as exc:
            mapped = classify_provider_error(exc)
            logger.warning("genai_request_failed", model=self.model, error=str(exc), mapped=type(mapped).__name__)
            if mapped is exc:
                raise
            raise mapped from exc

        block_reason = _block_reason_name(response)
        finish_reason = _finish_reason_name(response)
        logger.debug(
            "genai_response",
            model=self.model,
            finish_reason=finish_reason,
            usage=str(getattr(response, "usage_metadata", None)),
        )
        if block_reason or finish_reason in _BLOCKED_FINISH_REASONS:
            raise CompletionRefusedError(
                f"GenAI blocked the completion (block_reason={block_reason}, finish_reason={finish_reason})"
            )

        return getattr(response, "text", None) or ""

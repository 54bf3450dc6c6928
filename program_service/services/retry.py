from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

import structlog
from pydantic import BaseModel

from ..exceptions import (
    CompletionError,
    CompletionRefusedError,
    EmptyResponseError,
    ResponseParseError,
    StageValidationError,
    TransportError,
)
from ..metrics import PLAN_STAGE_ATTEMPTS_TOTAL
from .stage_client import StageClient
from .stages import StageSpec
from .validation import validate

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int
    base_delay: float = 0.0

    def backoff(self, attempt: int) -> float:
        return self.base_delay * 2 ** (attempt - 1)


def _outcome(exc: CompletionError) -> str:
    if isinstance(exc, TransportError):
        return "transport_error"
    if isinstance(exc, EmptyResponseError):
        return "empty"
    if isinstance(exc, ResponseParseError):
        return "parse_error"
    if isinstance(exc, CompletionRefusedError):
        return "refused"
    return "completion_error"


async def run_stage(
    client: StageClient,
    stage: StageSpec,
    user_prompt: str,
    *,
    policy: RetryPolicy,
    temperature: float,
    requested_ids: Sequence[str] | None = None,
    sleep: Sleep = asyncio.sleep,
) -> BaseModel:
    """Call, normalize and validate one stage until it yields a valid document.

    Parse, empty and validation failures are retried immediately; transport
    failures back off exponentially; refusals and anything outside the
    completion error taxonomy propagate at once.
    """
    context = {"expected_day_type_ids": list(requested_ids)} if requested_ids else None
    log = logger.bind(stage=stage.name, requested_ids=list(requested_ids) if requested_ids else None)

    for attempt in range(1, policy.max_attempts + 1):
        last_attempt = attempt == policy.max_attempts
        try:
            raw = await client.call(
                stage.system_prompt,
                user_prompt,
                temperature=temperature,
                max_output_tokens=stage.max_output_tokens,
            )
        except CompletionError as exc:
            outcome = _outcome(exc)
            PLAN_STAGE_ATTEMPTS_TOTAL.labels(stage=stage.name, outcome=outcome).inc()
            log.warning("stage_attempt_failed", attempt=attempt, outcome=outcome, error=str(exc))
            if not exc.retryable or last_attempt:
                raise
            if isinstance(exc, TransportError):
                await sleep(policy.backoff(attempt))
            continue

        result = validate(stage.model, stage.normalize(raw, requested_ids), context=context)
        if result.ok:
            PLAN_STAGE_ATTEMPTS_TOTAL.labels(stage=stage.name, outcome="success").inc()
            log.info("stage_succeeded", attempt=attempt)
            return result.unwrap()

        PLAN_STAGE_ATTEMPTS_TOTAL.labels(stage=stage.name, outcome="invalid").inc()
        log.warning(
            "stage_output_invalid",
            attempt=attempt,
            issues=[issue.as_dict() for issue in result.issues[:10]],
        )
        if last_attempt:
            raise StageValidationError(stage.name, attempt, result.issues)

    raise RuntimeError(f"Stage {stage.name} ran with a non-positive attempt budget")

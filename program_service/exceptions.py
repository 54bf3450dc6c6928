from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .services.validation import ValidationIssue


class PlanGenerationError(RuntimeError):
    """Base class for every failure surfaced by the generation pipeline."""


class CompletionError(PlanGenerationError):
    """Failure while obtaining or reading a completion for one stage call."""

    retryable = False


class TransportError(CompletionError):
    """Network failure, provider 5xx/429 or per-call timeout. Retried with backoff."""

    retryable = True

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(CompletionError):
    retryable = True


class ResponseParseError(CompletionError):
    """Completion text is not valid JSON after fence stripping."""

    retryable = True

    def __init__(self, message: str, *, preview: str = ""):
        super().__init__(message)
        self.preview = preview


class CompletionRefusedError(CompletionError):
    """Provider refused the request (safety block, bad request, auth). Fatal for the stage."""


class StageValidationError(PlanGenerationError):
    """Stage output still failed schema validation after the last attempt."""

    def __init__(self, stage: str, attempts: int, issues: Sequence[ValidationIssue]):
        self.stage = stage
        self.attempts = attempts
        self.issues = tuple(issues)
        rendered = "; ".join(f"{issue.path}: {issue.message}" for issue in self.issues[:10])
        super().__init__(f"Invalid {stage} structure from model after {attempts} attempt(s): {rendered}")


class CompositionError(PlanGenerationError):
    """Blueprint and detail outputs disagree; assembly cannot produce a full program."""


class PipelineTimeoutError(PlanGenerationError):
    def __init__(self, budget_seconds: float):
        self.budget_seconds = budget_seconds
        super().__init__(
            "Request timeout - The plan generation is taking longer than expected. Please try again."
        )

"""Schema validation that reports problems as data instead of raising.

``validate`` wraps pydantic so callers (chiefly the retry controller) can branch
on ``result.ok`` and forward ``result.issues`` into logs and terminal errors.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass(frozen=True)
class ValidationResult(Generic[ModelT]):
    value: ModelT | None = None
    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.issues

    def unwrap(self) -> ModelT:
        if self.value is None:
            raise ValueError("validation failed: " + "; ".join(f"{i.path}: {i.message}" for i in self.issues))
        return self.value


def _format_path(loc: tuple[int | str, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path or "$"


def issues_from_errors(errors: Iterable[Mapping[str, Any]]) -> tuple[ValidationIssue, ...]:
    return tuple(
        ValidationIssue(path=_format_path(tuple(err.get("loc", ()))), message=err.get("msg", "invalid"))
        for err in errors
    )


def issues_from_error(exc: ValidationError) -> tuple[ValidationIssue, ...]:
    return issues_from_errors(exc.errors(include_url=False))


def validate(
    model: type[ModelT],
    data: Any,
    *,
    context: Mapping[str, Any] | None = None,
) -> ValidationResult[ModelT]:
    try:
        value = model.model_validate(data, context=dict(context) if context else None)
    except ValidationError as exc:
        return ValidationResult(issues=issues_from_error(exc))
    return ValidationResult(value=value)

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Hashable, Mapping, Sequence
from typing import TypeVar

from ..exceptions import CompositionError
from ..schemas.details import CoachNotes, DayTypeDetail, PlanDetails, RecoveryDetailsMap, WorkoutDetailsMap

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


def chunked(items: Sequence[str], size: int) -> list[tuple[str, ...]]:
    if size < 1:
        raise ValueError("batch size must be positive")
    return [tuple(items[start : start + size]) for start in range(0, len(items), size)]


async def gather_keyed(awaitables: Mapping[K, Awaitable[T]]) -> dict[K, T]:
    """Run awaitables concurrently and return their results under the same keys.

    All-or-nothing: the first failure cancels the remaining tasks and is re-raised.
    """
    tasks = {key: asyncio.ensure_future(awaitable) for key, awaitable in awaitables.items()}
    try:
        await asyncio.gather(*tasks.values())
    except BaseException:
        for task in tasks.values():
            task.cancel()
        await asyncio.gather(*tasks.values(), return_exceptions=True)
        raise
    return {key: task.result() for key, task in tasks.items()}


def merge_details(
    workout_batches: Mapping[tuple[str, ...], WorkoutDetailsMap],
    recovery: RecoveryDetailsMap | None,
    coach_notes: CoachNotes,
) -> PlanDetails:
    merged: dict[str, DayTypeDetail] = {}
    parts = [batch.root for batch in workout_batches.values()]
    if recovery is not None:
        parts.append(recovery.root)
    for part in parts:
        duplicates = sorted(set(merged) & set(part))
        if duplicates:
            raise CompositionError(f"dayTypeId(s) generated by more than one batch: {', '.join(duplicates)}")
        merged.update(part)
    return PlanDetails(day_type_details=merged, global_coach_notes=coach_notes)

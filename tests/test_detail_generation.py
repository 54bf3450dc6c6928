import asyncio

import pytest

from conftest import build_pipeline
from factories import (
    FakeCompletion,
    make_blueprint,
    make_coach_notes,
    make_workout_detail,
    plan_handler,
    requested_ids,
)
from program_service.exceptions import CompletionRefusedError, CompositionError
from program_service.prompts import (
    COACH_NOTES_SYSTEM_PROMPT,
    RECOVERY_DETAILS_SYSTEM_PROMPT,
    WORKOUT_DETAILS_SYSTEM_PROMPT,
)
from program_service.schemas.blueprint import PlanBlueprint
from program_service.schemas.details import CoachNotes, WorkoutDetailsMap
from program_service.services.detail_generation import chunked, gather_keyed, merge_details

EIGHT_WORKOUTS = tuple(f"workout_{n}" for n in range(1, 9))


def test_chunked():
    assert chunked(list("abcdefgh"), 3) == [("a", "b", "c"), ("d", "e", "f"), ("g", "h")]
    assert chunked([], 3) == []
    with pytest.raises(ValueError):
        chunked(["a"], 0)


@pytest.mark.asyncio
async def test_gather_keyed_preserves_keys():
    async def value(v, delay):
        await asyncio.sleep(delay)
        return v

    result = await gather_keyed({"slow": value(1, 0.02), "fast": value(2, 0)})

    assert result == {"slow": 1, "fast": 2}


@pytest.mark.asyncio
async def test_gather_keyed_cancels_siblings_on_failure():
    cancelled = asyncio.Event()

    async def hang():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    async def fail():
        await asyncio.sleep(0)
        raise CompletionRefusedError("blocked")

    with pytest.raises(CompletionRefusedError):
        await gather_keyed({"hang": hang(), "fail": fail()})

    assert cancelled.is_set()


def test_merge_rejects_duplicate_keys():
    notes = CoachNotes.model_validate(make_coach_notes())
    first = WorkoutDetailsMap.model_validate({"upper_a": make_workout_detail("upper_a")})
    second = WorkoutDetailsMap.model_validate({"upper_a": make_workout_detail("upper_a")})

    with pytest.raises(CompositionError):
        merge_details({("upper_a",): first, ("upper_a", "x"): second}, None, notes)


@pytest.mark.asyncio
async def test_workout_ids_are_batched_in_threes(assessment):
    doc = make_blueprint(EIGHT_WORKOUTS, ("recovery_a",))
    completion = FakeCompletion(plan_handler(doc))
    pipeline = build_pipeline(completion)

    details = await pipeline.generate_details(assessment, PlanBlueprint.model_validate(doc))

    batches = [requested_ids(user) for user in completion.calls_for(WORKOUT_DETAILS_SYSTEM_PROMPT)]
    assert sorted(len(batch) for batch in batches) == [2, 3, 3]
    assert sorted(i for batch in batches for i in batch) == sorted(EIGHT_WORKOUTS)
    assert len(completion.calls_for(RECOVERY_DETAILS_SYSTEM_PROMPT)) == 1
    assert len(completion.calls_for(COACH_NOTES_SYSTEM_PROMPT)) == 1
    assert set(details.day_type_details) == set(EIGHT_WORKOUTS) | {"recovery_a"}


@pytest.mark.asyncio
async def test_recovery_call_skipped_without_recovery_types(assessment):
    workout_ids = ("upper_a", "lower_a")
    doc = make_blueprint(workout_ids, (), microcycle=[workout_ids[i % 2] for i in range(14)])
    completion = FakeCompletion(plan_handler(doc))
    pipeline = build_pipeline(completion)

    details = await pipeline.generate_details(assessment, PlanBlueprint.model_validate(doc))

    assert completion.calls_for(RECOVERY_DETAILS_SYSTEM_PROMPT) == []
    assert len(completion.calls_for(COACH_NOTES_SYSTEM_PROMPT)) == 1
    assert set(details.day_type_details) == set(workout_ids)


@pytest.mark.asyncio
async def test_detail_calls_run_concurrently(assessment):
    doc = make_blueprint(EIGHT_WORKOUTS, ("recovery_a",))
    completion = FakeCompletion(plan_handler(doc), delay=0.2)
    pipeline = build_pipeline(completion)
    loop = asyncio.get_running_loop()

    started = loop.time()
    await pipeline.generate_details(assessment, PlanBlueprint.model_validate(doc))

    # Five calls of 0.2s each; sequential execution would take a full second.
    assert len(completion.calls) == 5
    assert loop.time() - started < 0.8


@pytest.mark.asyncio
async def test_failed_batch_fails_the_whole_fanout(assessment, blueprint_doc):
    handler = plan_handler(blueprint_doc)

    def refuse_recovery(system, user):
        if system == RECOVERY_DETAILS_SYSTEM_PROMPT:
            return CompletionRefusedError("blocked")
        return handler(system, user)

    pipeline = build_pipeline(FakeCompletion(refuse_recovery, delay=0.05))

    with pytest.raises(CompletionRefusedError):
        await pipeline.generate_details(assessment, PlanBlueprint.model_validate(blueprint_doc))

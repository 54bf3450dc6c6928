from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Awaitable, Callable, Sequence
from datetime import date, timedelta
from typing import Any, TypeVar

import structlog
from structlog.contextvars import bound_contextvars

from ..config import PipelineConfig
from ..exceptions import PipelineTimeoutError, PlanGenerationError
from ..metrics import PLAN_GENERATION_FAILURES_TOTAL, PLAN_GENERATION_SECONDS, PLANS_GENERATED_TOTAL
from ..prompts import (
    build_blueprint_prompt,
    build_coach_notes_prompt,
    build_plan_details_prompt,
    build_recovery_details_prompt,
    build_skeleton_prompt,
    build_tutorial_prompt,
    build_workout_details_prompt,
)
from ..schemas.assessment import Assessment
from ..schemas.blueprint import PlanBlueprint
from ..schemas.details import CoachNotes, PlanDetails, RecoveryDetailsMap, WorkoutDetailsMap
from ..schemas.program import Program
from ..schemas.template import ProgramTemplate, TutorialBatch, TutoredProgramTemplate
from . import stages
from .assembler import assemble
from .completion import TextCompletion
from .detail_generation import chunked, gather_keyed, merge_details
from .retry import RetryPolicy, Sleep, run_stage
from .stage_client import StageClient
from .template_generation import TUTORIAL_CHUNK_SIZE, collect_exercise_refs, merge_tutorials

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _tomorrow() -> date:
    return date.today() + timedelta(days=1)


class PlanPipeline:
    """Staged generation of a 90-day program.

    Blueprint first, then the detail stages fanned out concurrently, then a pure
    assembly step. Every stage call goes through the same retry loop; the whole
    run is bounded by ``config.pipeline_timeout_seconds``.
    """

    def __init__(
        self,
        completion: TextCompletion,
        config: PipelineConfig | None = None,
        *,
        default_start_date: Callable[[], date] = _tomorrow,
        sleep: Sleep = asyncio.sleep,
    ):
        self.config = config or PipelineConfig()
        self.client = StageClient(completion, timeout_seconds=self.config.stage_timeout_seconds)
        self.default_start_date = default_start_date
        self._sleep = sleep

    def _policy(self, stage: stages.StageSpec) -> RetryPolicy:
        attempts = self.config.light_max_attempts if stage.light else self.config.max_attempts
        return RetryPolicy(max_attempts=attempts, base_delay=self.config.base_delay)

    async def _run(
        self,
        stage: stages.StageSpec,
        user_prompt: str,
        requested_ids: Sequence[str] | None = None,
    ) -> Any:
        return await run_stage(
            self.client,
            stage,
            user_prompt,
            policy=self._policy(stage),
            temperature=self.config.temperature,
            requested_ids=requested_ids,
            sleep=self._sleep,
        )

    async def generate_blueprint(self, assessment: Assessment) -> PlanBlueprint:
        return await self._run(stages.BLUEPRINT, build_blueprint_prompt(assessment=assessment))

    async def generate_workout_details(
        self,
        assessment: Assessment,
        blueprint: PlanBlueprint,
        day_type_ids: Sequence[str],
    ) -> WorkoutDetailsMap:
        prompt = build_workout_details_prompt(assessment=assessment, blueprint=blueprint, day_type_ids=day_type_ids)
        return await self._run(stages.WORKOUT_DETAILS, prompt, day_type_ids)

    async def generate_recovery_details(
        self,
        assessment: Assessment,
        blueprint: PlanBlueprint,
        day_type_ids: Sequence[str],
    ) -> RecoveryDetailsMap:
        prompt = build_recovery_details_prompt(assessment=assessment, blueprint=blueprint, day_type_ids=day_type_ids)
        return await self._run(stages.RECOVERY_DETAILS, prompt, day_type_ids)

    async def generate_coach_notes(self, assessment: Assessment, blueprint: PlanBlueprint) -> CoachNotes:
        prompt = build_coach_notes_prompt(assessment=assessment, blueprint=blueprint)
        return await self._run(stages.COACH_NOTES, prompt)

    async def generate_plan_details(
        self,
        assessment: Assessment,
        blueprint: PlanBlueprint,
        day_type_ids: Sequence[str] | None = None,
    ) -> PlanDetails:
        """Single-call alternative to ``generate_details``: every day type plus coach notes at once."""
        ids = list(day_type_ids) if day_type_ids else [day_type.id for day_type in blueprint.split_design.day_types]
        prompt = build_plan_details_prompt(assessment=assessment, blueprint=blueprint, day_type_ids=ids)
        return await self._run(stages.PLAN_DETAILS, prompt, ids)

    async def generate_details(self, assessment: Assessment, blueprint: PlanBlueprint) -> PlanDetails:
        batches = chunked(blueprint.workout_day_type_ids(), self.config.detail_batch_size)
        recovery_ids = tuple(blueprint.recovery_day_type_ids())

        jobs: dict[tuple[str, tuple[str, ...]], Awaitable[Any]] = {
            ("workouts", batch): self.generate_workout_details(assessment, blueprint, batch) for batch in batches
        }
        if recovery_ids:
            jobs[("recovery", recovery_ids)] = self.generate_recovery_details(assessment, blueprint, recovery_ids)
        jobs[("coach_notes", ())] = self.generate_coach_notes(assessment, blueprint)

        logger.info(
            "detail_fanout_started",
            workout_batches=[list(batch) for batch in batches],
            recovery_ids=list(recovery_ids),
        )
        results = await gather_keyed(jobs)

        return merge_details(
            {batch: result for (kind, batch), result in results.items() if kind == "workouts"},
            results.get(("recovery", recovery_ids)),
            results[("coach_notes", ())],
        )

    async def _build_program(self, assessment: Assessment, start_date: date) -> Program:
        blueprint = await self.generate_blueprint(assessment)
        logger.info(
            "blueprint_generated",
            title=blueprint.program_overview.title,
            day_types=[day_type.id for day_type in blueprint.split_design.day_types],
        )
        details = await self.generate_details(assessment, blueprint)
        return assemble(blueprint, details, assessment, start_date)

    async def generate_program_template(self, assessment: Assessment) -> TutoredProgramTemplate:
        return await self._within_budget(self._build_template(assessment), variant="template")

    async def _build_template(self, assessment: Assessment) -> TutoredProgramTemplate:
        skeleton: ProgramTemplate = await self._run(stages.TEMPLATE_SKELETON, build_skeleton_prompt(assessment=assessment))
        refs = collect_exercise_refs(skeleton)
        chunks = [refs[start : start + TUTORIAL_CHUNK_SIZE] for start in range(0, len(refs), TUTORIAL_CHUNK_SIZE)]
        logger.info("tutorial_enrichment_started", exercises=len(refs), chunks=len(chunks))

        batches: dict[int, TutorialBatch] = await gather_keyed(
            {
                index: self._run(stages.TUTORIALS, build_tutorial_prompt(assessment=assessment, exercises=chunk))
                for index, chunk in enumerate(chunks)
            }
        )
        entries = [entry for index in sorted(batches) for entry in batches[index].tutorials]
        return merge_tutorials(skeleton, entries)

    async def generate_90_day_plan(self, assessment: Assessment, start_date: date | None = None) -> Program:
        start = start_date or self.default_start_date()
        return await self._within_budget(self._build_program(assessment, start), variant="90_day")

    async def _within_budget(self, work: Awaitable[T], *, variant: str) -> T:
        budget = self.config.pipeline_timeout_seconds
        with bound_contextvars(generation_id=uuid.uuid4().hex, variant=variant):
            started = time.perf_counter()
            try:
                result = await asyncio.wait_for(work, timeout=budget)
            except TimeoutError as exc:
                PLAN_GENERATION_FAILURES_TOTAL.labels(variant=variant, error="PipelineTimeoutError").inc()
                logger.error("plan_generation_timed_out", budget_seconds=budget)
                raise PipelineTimeoutError(budget) from exc
            except PlanGenerationError as exc:
                PLAN_GENERATION_FAILURES_TOTAL.labels(variant=variant, error=type(exc).__name__).inc()
                logger.error("plan_generation_failed", error=str(exc), error_type=type(exc).__name__)
                raise
            elapsed = time.perf_counter() - started
            if variant == "90_day":
                PLAN_GENERATION_SECONDS.observe(elapsed)
            PLANS_GENERATED_TOTAL.labels(variant=variant).inc()
            logger.info("plan_generated", elapsed_seconds=round(elapsed, 2))
            return result

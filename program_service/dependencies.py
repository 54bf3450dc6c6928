from functools import lru_cache

from .config import PipelineConfig, settings
from .services.coaching import CoachingService
from .services.completion import GenAITextCompletion
from .services.pipeline import PlanPipeline


@lru_cache
def get_completion() -> GenAITextCompletion:
    return GenAITextCompletion.from_settings(settings)


@lru_cache
def get_pipeline() -> PlanPipeline:
    return PlanPipeline(get_completion(), PipelineConfig.from_settings(settings))


@lru_cache
def get_coaching_service() -> CoachingService:
    return CoachingService(get_completion(), PipelineConfig.from_settings(settings))

from datetime import date

import pytest
from fastapi.testclient import TestClient

from factories import FakeCompletion, make_blueprint, plan_handler
from program_service.config import PipelineConfig
from program_service.schemas.assessment import Assessment
from program_service.services.coaching import CoachingService
from program_service.services.pipeline import PlanPipeline

FIXED_TOMORROW = date(2025, 1, 1)


def build_pipeline(completion, **overrides) -> PlanPipeline:
    config = PipelineConfig(
        **{
            "base_delay": 0.0,
            "stage_timeout_seconds": 5.0,
            "pipeline_timeout_seconds": 10.0,
            **overrides,
        }
    )
    return PlanPipeline(completion, config, default_start_date=lambda: FIXED_TOMORROW)


@pytest.fixture()
def assessment() -> Assessment:
    return Assessment(
        goals=["Build muscle"],
        weekly_days=4,
        daily_minutes=45,
        age=31,
        weight_kg=78,
        height_cm=180,
        gender="male",
        has_equipment=True,
        training_experience="intermediate",
    )


@pytest.fixture()
def blueprint_doc() -> dict:
    return make_blueprint()


@pytest.fixture()
def completion(blueprint_doc) -> FakeCompletion:
    return FakeCompletion(plan_handler(blueprint_doc))


@pytest.fixture()
def pipeline(completion) -> PlanPipeline:
    return build_pipeline(completion)


@pytest.fixture()
def client(pipeline: PlanPipeline, completion):
    from program_service.dependencies import get_coaching_service, get_pipeline
    from program_service.main import app

    coach = CoachingService(completion, pipeline.config)
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_coaching_service] = lambda: coach

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c

    app.dependency_overrides.clear()

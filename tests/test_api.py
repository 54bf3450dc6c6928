from fastapi.testclient import TestClient

from conftest import build_pipeline
from factories import FakeCompletion, make_blueprint, plan_handler
from program_service.dependencies import get_pipeline
from program_service.exceptions import CompletionRefusedError
from program_service.main import app

ASSESSMENT = {"goals": ["Build muscle"], "weekly_days": 4, "daily_minutes": 45, "has_equipment": True}


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_generate_90_day_plan(client: TestClient):
    r = client.post("/api/generate-90day-plan", json={"assessment": ASSESSMENT})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["programLengthDays"] == 90
    assert body["startDate"] == "2025-01-01"
    assert len(body["template"]["training"]) == 14
    assert len(body["workouts"]) == 52
    assert body["workouts"][0]["id"] == "day-1"
    assert body["workouts"][0]["exercises"][0]["rest"] == "90s"
    assert body["goals"] == ["Build muscle"]
    assert body["weeklyDays"] == 4


def test_correlation_id_header_is_echoed(client: TestClient):
    r = client.get("/health", headers={"X-Request-ID": "4f5a3c1e-8a1b-4d55-9c3e-0e8b5b1f7a10"})
    assert r.headers["X-Request-ID"] == "4f5a3c1e-8a1b-4d55-9c3e-0e8b5b1f7a10"


def test_stage_endpoints(client: TestClient):
    blueprint = make_blueprint()

    r_blueprint = client.post("/api/plan-blueprint", json={"assessment": ASSESSMENT})
    assert r_blueprint.status_code == 200, r_blueprint.text
    assert r_blueprint.json()["splitDesign"]["microcycleLengthDays"] == 14

    r_workouts = client.post(
        "/api/plan-details-workouts",
        json={"assessment": ASSESSMENT, "blueprint": blueprint, "dayTypeIds": ["upper_a", "lower_a"]},
    )
    assert r_workouts.status_code == 200, r_workouts.text
    assert sorted(r_workouts.json()) == ["lower_a", "upper_a"]

    r_recovery = client.post(
        "/api/plan-details-recovery",
        json={"assessment": ASSESSMENT, "blueprint": blueprint, "dayTypeIds": ["recovery_a"]},
    )
    assert r_recovery.status_code == 200, r_recovery.text
    assert len(r_recovery.json()["recovery_a"]["recoveryRoutine"]["steps"]) == 3

    r_notes = client.post("/api/plan-details-coach-notes", json={"assessment": ASSESSMENT, "blueprint": blueprint})
    assert r_notes.status_code == 200, r_notes.text
    assert len(r_notes.json()["phaseBreakdown"]) == 3

    r_details = client.post("/api/plan-details", json={"assessment": ASSESSMENT, "blueprint": blueprint})
    assert r_details.status_code == 200, r_details.text
    assert set(r_details.json()["dayTypeDetails"]) == {"upper_a", "lower_a", "full_a", "recovery_a"}


def test_wrong_method_is_405(client: TestClient):
    r = client.get("/api/generate-90day-plan")
    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed"}


def test_invalid_body_is_400(client: TestClient):
    r = client.post("/api/generate-90day-plan", json={"assessment": {"weekly_days": "many"}})
    assert r.status_code == 400
    assert r.json()["error"].startswith("Invalid request body: assessment.weekly_days")


def test_missing_assessment_is_400(client: TestClient):
    r = client.post("/api/plan-blueprint", json={})
    assert r.status_code == 400
    assert r.json()["error"].startswith("Invalid request body: assessment")


def test_missing_day_type_ids_is_400(client: TestClient):
    r = client.post(
        "/api/plan-details-workouts",
        json={"assessment": ASSESSMENT, "blueprint": make_blueprint(), "dayTypeIds": []},
    )
    assert r.status_code == 400


def test_preflight_options(client: TestClient):
    r = client.options("/api/generate-90day-plan")
    assert r.status_code == 200
    assert client.options("/api/coach-checkin").status_code == 200


def test_unknown_path_is_404(client: TestClient):
    r = client.get("/unknown")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}


def test_unknown_api_path_is_404(client: TestClient):
    assert client.get("/api/unknown").status_code == 404
    assert client.options("/api/unknown").status_code == 404


def test_pipeline_timeout_is_504(blueprint_doc):
    slow = build_pipeline(FakeCompletion(plan_handler(blueprint_doc), delay=0.5), pipeline_timeout_seconds=0.1)
    app.dependency_overrides[get_pipeline] = lambda: slow
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            r = c.post("/api/generate-90day-plan", json={"assessment": ASSESSMENT})
    finally:
        app.dependency_overrides.clear()

    assert r.status_code == 504
    body = r.json()
    assert body["timeout"] is True
    assert body["error"].startswith("Request timeout")


def test_generation_failure_is_500():
    refused = build_pipeline(FakeCompletion(lambda system, user: CompletionRefusedError("blocked by safety filter")))
    app.dependency_overrides[get_pipeline] = lambda: refused
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            r = c.post("/api/plan-blueprint", json={"assessment": ASSESSMENT})
    finally:
        app.dependency_overrides.clear()

    assert r.status_code == 500
    assert "blocked by safety filter" in r.json()["error"]

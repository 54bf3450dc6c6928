import pytest
from fastapi.testclient import TestClient

from factories import FakeCompletion
from program_service.config import PipelineConfig
from program_service.dependencies import get_coaching_service
from program_service.exceptions import CompletionRefusedError, TransportError
from program_service.main import app
from program_service.prompts import (
    CHECK_IN_SYSTEM_PROMPT,
    COACH_HINT_SYSTEM_PROMPT,
    build_check_in_prompt,
    build_coach_hint_prompt,
)
from program_service.schemas.coaching import CoachCheckInRequest, CoachHintRequest
from program_service.services.coaching import (
    CHECK_IN_FALLBACKS,
    EMPTY_HINT,
    CoachingService,
    fallback_hint,
)


def _hint(**overrides) -> CoachHintRequest:
    values = {"streakDays": 3, "onTimePercentage": 72.4, "completionRate": 65, "recentCheckins": 5}
    return CoachHintRequest.model_validate({**values, "tone": "analytical", **overrides})


def _coach(reply, *, delay=0.0, timeout=5.0) -> tuple[CoachingService, FakeCompletion]:
    completion = FakeCompletion(lambda system, user: reply, delay=delay)
    return CoachingService(completion, PipelineConfig(stage_timeout_seconds=timeout)), completion


def test_check_in_prompt_carries_context():
    request = CoachCheckInRequest.model_validate(
        {"userMessage": "Legs feel heavy", "type": "pre", "context": {"dayNumber": 12, "workoutName": "Lower A"}}
    )

    prompt = build_check_in_prompt(request)

    assert prompt.startswith("The user is about to start their workout and shared this:\n\"Legs feel heavy\"")
    assert "This is day 12 of their 90-day program." in prompt
    assert "Workout: Lower A" in prompt
    assert prompt.endswith("to motivate them and give one helpful tip.")


def test_post_check_in_prompt_without_context():
    request = CoachCheckInRequest(user_message="Done!", type="post")

    prompt = build_check_in_prompt(request)

    assert prompt.startswith("The user just finished their workout")
    assert "90-day program" not in prompt
    assert "Workout:" not in prompt
    assert "one recovery tip" in prompt


def test_hint_prompt_rounds_rates_and_names_tone():
    prompt = build_coach_hint_prompt(_hint())

    assert prompt.startswith("Generate a fact-based and constructive one-sentence coach hint")
    assert "- On-time completion rate: 72%" in prompt
    assert "- Weekly completion rate: 65%" in prompt
    assert "- Recent activity: 5 tasks completed in last 7 days" in prompt


@pytest.mark.asyncio
async def test_check_in_returns_trimmed_plain_text():
    coach, completion = _coach("  Warm up well and own the first set.\n")

    reply = await coach.check_in(CoachCheckInRequest(user_message="Ready", type="pre"))

    assert reply == "Warm up well and own the first set."
    assert completion.calls[0][0] == CHECK_IN_SYSTEM_PROMPT
    assert completion.json_outputs == [False]


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["pre", "post"])
async def test_check_in_falls_back_when_the_model_fails(kind):
    coach, _ = _coach(TransportError("upstream 503", status_code=503))

    reply = await coach.check_in(CoachCheckInRequest(user_message="Tired", type=kind))

    assert reply == CHECK_IN_FALLBACKS[kind]


@pytest.mark.asyncio
async def test_check_in_falls_back_on_blank_reply():
    coach, _ = _coach("   ")

    reply = await coach.check_in(CoachCheckInRequest(user_message="Tired", type="post"))

    assert reply.startswith("Well done! Recovery is just as important as training.")


@pytest.mark.asyncio
async def test_check_in_falls_back_on_timeout():
    coach, _ = _coach("too late", delay=0.2, timeout=0.05)

    reply = await coach.check_in(CoachCheckInRequest(user_message="Ready", type="pre"))

    assert reply == CHECK_IN_FALLBACKS["pre"]


@pytest.mark.asyncio
async def test_unexpected_errors_are_not_masked():
    coach, _ = _coach(ValueError("bug"))

    with pytest.raises(ValueError):
        await coach.check_in(CoachCheckInRequest(user_message="Ready", type="pre"))


@pytest.mark.asyncio
async def test_hint_uses_model_reply():
    coach, completion = _coach("Log tomorrow's session before noon to lift your on-time rate.")

    assert await coach.coach_hint(_hint()) == "Log tomorrow's session before noon to lift your on-time rate."
    assert completion.calls[0][0] == COACH_HINT_SYSTEM_PROMPT


@pytest.mark.asyncio
async def test_blank_hint_has_a_default():
    coach, _ = _coach("")

    assert await coach.coach_hint(_hint()) == EMPTY_HINT


@pytest.mark.asyncio
async def test_hint_falls_back_on_refusal():
    coach, _ = _coach(CompletionRefusedError("blocked"))

    assert await coach.coach_hint(_hint(streakDays=9)) == "You're on fire! Keep this momentum going."


@pytest.mark.parametrize(
    ("overrides", "expected"),
    [
        ({"streakDays": 7, "completionRate": 10}, "You're on fire! Keep this momentum going."),
        ({"completionRate": 80}, "Great progress! You're staying consistent."),
        ({"completionRate": 49.9}, "Try to focus on completing at least one task per day to build momentum."),
        ({"completionRate": 50}, "Every step forward counts. Keep going!"),
    ],
)
def test_fallback_hint_thresholds(overrides, expected):
    assert fallback_hint(_hint(**overrides)) == expected


def test_coach_check_in_endpoint(client: TestClient):
    r = client.post(
        "/api/coach-checkin",
        json={"userMessage": "Crushed it", "type": "post", "context": {"dayNumber": 30}},
    )

    assert r.status_code == 200, r.text
    assert r.json() == {"response": "Strong finish today. Refuel with protein and get to bed early."}


def test_coach_hint_endpoint(client: TestClient):
    body = {"streakDays": 2, "onTimePercentage": 50, "completionRate": 70, "recentCheckins": 3, "tone": "motivational"}

    r = client.post("/api/coach-hint", json=body)

    assert r.status_code == 200, r.text
    assert r.json() == {"hint": "Two more sessions this week keep your streak alive."}


@pytest.mark.parametrize(
    ("body", "field"),
    [
        ({"type": "pre"}, "userMessage"),
        ({"userMessage": "", "type": "pre"}, "userMessage"),
        ({"userMessage": "Ready"}, "type"),
        ({"userMessage": "Ready", "type": "during"}, "type"),
    ],
)
def test_coach_check_in_requires_message_and_type(client: TestClient, body, field):
    r = client.post("/api/coach-checkin", json=body)

    assert r.status_code == 400
    assert r.json()["error"].startswith(f"Invalid request body: {field}")


def test_coach_check_in_survives_provider_outage():
    coach = CoachingService(FakeCompletion(lambda system, user: TransportError("down")))
    app.dependency_overrides[get_coaching_service] = lambda: coach
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            r = c.post("/api/coach-checkin", json={"userMessage": "Ready", "type": "pre"})
    finally:
        app.dependency_overrides.clear()

    assert r.status_code == 200
    assert r.json() == {"response": CHECK_IN_FALLBACKS["pre"]}


def test_coach_check_in_rejects_get(client: TestClient):
    r = client.get("/api/coach-checkin")

    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed"}

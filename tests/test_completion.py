from types import SimpleNamespace

import httpx
import pytest

from program_service.config import PipelineConfig, Settings
from program_service.exceptions import CompletionRefusedError, TransportError
from program_service.services.completion import (
    GenAITextCompletion,
    SlidingWindowRateLimiter,
    classify_provider_error,
)


class ProviderError(Exception):
    def __init__(self, status_code):
        super().__init__(f"provider said {status_code}")
        self.status_code = status_code


@pytest.mark.parametrize("status", [500, 503, 408, 429])
def test_transient_statuses_are_transport_errors(status):
    mapped = classify_provider_error(ProviderError(status))

    assert isinstance(mapped, TransportError)
    assert mapped.status_code == status


@pytest.mark.parametrize("status", [400, 401, 403, 404])
def test_client_statuses_are_refusals(status):
    assert isinstance(classify_provider_error(ProviderError(status)), CompletionRefusedError)


def test_network_errors_are_transport_errors():
    assert isinstance(classify_provider_error(httpx.ConnectError("down")), TransportError)
    assert isinstance(classify_provider_error(httpx.ReadTimeout("slow")), TransportError)


def test_unknown_errors_are_left_alone():
    exc = ValueError("bug")
    assert classify_provider_error(exc) is exc


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


def _completion(models: FakeModels) -> GenAITextCompletion:
    completion = GenAITextCompletion(model="gemini-test", api_key="key", rate_limit_per_minute=0)
    completion._client = SimpleNamespace(models=models)
    return completion


def _response(text, *, finish_reason="STOP", block_reason=None):
    return SimpleNamespace(
        text=text,
        candidates=[SimpleNamespace(finish_reason=SimpleNamespace(name=finish_reason))],
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
        usage_metadata=None,
    )


@pytest.mark.asyncio
async def test_complete_sends_system_prompt_and_json_mime_type():
    models = FakeModels(response=_response('{"ok": true}'))

    text = await _completion(models).complete("system", "user", temperature=0.4, max_output_tokens=123)

    assert text == '{"ok": true}'
    config = models.calls[0]["config"]
    assert models.calls[0]["contents"] == "user"
    assert config.system_instruction == "system"
    assert config.response_mime_type == "application/json"
    assert config.max_output_tokens == 123


@pytest.mark.asyncio
async def test_plain_text_completion_skips_json_mime_type():
    models = FakeModels(response=_response("Nice work today."))

    text = await _completion(models).complete(
        "system", "user", temperature=0.7, max_output_tokens=150, json_output=False
    )

    assert text == "Nice work today."
    assert models.calls[0]["config"].response_mime_type == "text/plain"


@pytest.mark.asyncio
async def test_safety_finish_is_refused():
    models = FakeModels(response=_response("", finish_reason="SAFETY"))

    with pytest.raises(CompletionRefusedError):
        await _completion(models).complete("system", "user", temperature=0.4, max_output_tokens=10)


@pytest.mark.asyncio
async def test_blocked_prompt_is_refused():
    models = FakeModels(response=_response(None, block_reason=SimpleNamespace(name="SAFETY")))

    with pytest.raises(CompletionRefusedError):
        await _completion(models).complete("system", "user", temperature=0.4, max_output_tokens=10)


@pytest.mark.asyncio
async def test_missing_text_is_empty_string():
    models = FakeModels(response=_response(None, finish_reason="MAX_TOKENS"))

    assert await _completion(models).complete("system", "user", temperature=0.4, max_output_tokens=10) == ""


@pytest.mark.asyncio
async def test_provider_errors_are_mapped():
    models = FakeModels(error=ProviderError(503))

    with pytest.raises(TransportError) as exc_info:
        await _completion(models).complete("system", "user", temperature=0.4, max_output_tokens=10)

    assert isinstance(exc_info.value.__cause__, ProviderError)


@pytest.mark.asyncio
async def test_missing_api_key_fails_at_call_time():
    completion = GenAITextCompletion(model="gemini-test", api_key=None)

    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        await completion.complete("system", "user", temperature=0.4, max_output_tokens=10)


@pytest.mark.asyncio
async def test_rate_limiter_admits_up_to_the_limit():
    limiter = SlidingWindowRateLimiter(max_calls=3, window_seconds=60)

    for _ in range(3):
        await limiter.acquire("model")

    assert len(limiter._history["model"]) == 3


def test_settings_tolerate_bad_values(monkeypatch):
    monkeypatch.setenv("GENAI_MAX_ATTEMPTS", "lots")
    monkeypatch.setenv("DETAIL_BATCH_SIZE", "4")
    monkeypatch.setenv("GENAI_TEMPERATURE", "9")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

    settings = Settings()
    config = PipelineConfig.from_settings(settings)

    assert config.max_attempts == 3
    assert config.detail_batch_size == 4
    assert config.temperature == 2.0
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_only_gemini_is_supported(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "openai")

    with pytest.raises(RuntimeError, match="Unsupported"):
        GenAITextCompletion.from_settings(Settings())

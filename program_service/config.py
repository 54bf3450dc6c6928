import os
from dataclasses import dataclass


class Settings:
    @property
    def service_name(self) -> str:
        return os.getenv("SERVICE_NAME", "program-service")

    @property
    def llm_provider(self) -> str:
        return os.getenv("LLM_PROVIDER", "gemini").lower()

    @property
    def llm_model(self) -> str:
        return os.getenv("LLM_MODEL", "gemini-2.0-flash")

    @property
    def staged_llm_model(self) -> str:
        return os.getenv("GENAI_STAGED_MODEL", self.llm_model)

    @property
    def genai_api_key(self) -> str | None:
        return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")

    @property
    def genai_temperature(self) -> float:
        try:
            return min(2.0, max(0.0, float(os.getenv("GENAI_TEMPERATURE", "0.7"))))
        except ValueError:
            return 0.7

    @property
    def genai_max_attempts(self) -> int:
        try:
            return max(1, int(os.getenv("GENAI_MAX_ATTEMPTS", "3")))
        except ValueError:
            return 3

    @property
    def genai_light_max_attempts(self) -> int:
        try:
            return max(1, int(os.getenv("GENAI_LIGHT_MAX_ATTEMPTS", "2")))
        except ValueError:
            return 2

    @property
    def genai_base_delay(self) -> float:
        try:
            return max(0.0, float(os.getenv("GENAI_BASE_DELAY", "1.5")))
        except ValueError:
            return 1.5

    @property
    def genai_rate_limit_per_minute(self) -> int:
        try:
            return max(0, int(os.getenv("GENAI_RATE_LIMIT_PER_MINUTE", "60")))
        except ValueError:
            return 60

    @property
    def genai_rate_limit_window_seconds(self) -> float:
        try:
            return max(1.0, float(os.getenv("GENAI_RATE_LIMIT_WINDOW_SECONDS", "60")))
        except ValueError:
            return 60.0

    @property
    def genai_rate_limit_concurrency(self) -> int:
        try:
            return max(1, int(os.getenv("GENAI_RATE_LIMIT_CONCURRENCY", "8")))
        except ValueError:
            return 8

    @property
    def detail_batch_size(self) -> int:
        try:
            return max(1, int(os.getenv("DETAIL_BATCH_SIZE", "3")))
        except ValueError:
            return 3

    @property
    def stage_timeout_seconds(self) -> float:
        try:
            return max(1.0, float(os.getenv("STAGE_TIMEOUT_SECONDS", "45")))
        except ValueError:
            return 45.0

    @property
    def pipeline_timeout_seconds(self) -> float:
        try:
            return max(1.0, float(os.getenv("PIPELINE_TIMEOUT_SECONDS", "55")))
        except ValueError:
            return 55.0

    @property
    def cors_origins(self) -> list[str]:
        raw = os.getenv("CORS_ORIGINS", "*")
        if raw.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


settings = Settings()


@dataclass(frozen=True)
class PipelineConfig:
    """Explicit knobs for one PlanPipeline instance.

    Built from ``Settings`` by the application, or directly by tests, so the
    pipeline never reads process state on its own.
    """

    max_attempts: int = 3
    light_max_attempts: int = 2
    base_delay: float = 1.5
    detail_batch_size: int = 3
    stage_timeout_seconds: float = 45.0
    pipeline_timeout_seconds: float = 55.0
    temperature: float = 0.7
    program_length_days: int = 90
    microcycle_length_days: int = 14

    @classmethod
    def from_settings(cls, source: Settings) -> "PipelineConfig":
        return cls(
            max_attempts=source.genai_max_attempts,
            light_max_attempts=source.genai_light_max_attempts,
            base_delay=source.genai_base_delay,
            detail_batch_size=source.detail_batch_size,
            stage_timeout_seconds=source.stage_timeout_seconds,
            pipeline_timeout_seconds=source.pipeline_timeout_seconds,
            temperature=source.genai_temperature,
        )

"""
Onboarding - Configuration and settings.

Loaded from environment variables / .env. With no OPENAI_API_KEY the
question oracle runs offline on canned questions.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OnboardingSettings(BaseSettings):
    """Settings for the questionnaire engine, oracle, and snapshot store."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Question oracle (any OpenAI-compatible endpoint, e.g. Groq)
    openai_api_key: str = ""
    openai_base_url: str | None = None
    oracle_model: str = "llama-3.1-70b-versatile"
    oracle_temperature: float = 0.3
    oracle_max_tokens: int = 1500
    oracle_timeout_seconds: float = Field(default=30.0, gt=0)

    # Session
    completion_threshold: int = Field(default=80, ge=0, le=100)
    history_limit: int = Field(default=10, ge=1)
    estimated_total_steps: int = 8
    resume_sessions: bool = False

    # Persistence
    snapshot_path: Path = Path(".onboarding/session.json")
    autosave_delay_seconds: float = Field(default=1.0, ge=0)

    # Application
    onboarding_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ONBOARDING_LOG_PROMPTS=1 - write each oracle call to prompt_logs/
    onboarding_log_prompts: bool = False
    # ONBOARDING_EVENT_LOG=1 - write telemetry events to session_logs/*.jsonl
    onboarding_event_log: bool = False

    @property
    def oracle_configured(self) -> bool:
        return bool(self.openai_api_key.strip())


@lru_cache
def get_settings() -> OnboardingSettings:
    """Get cached settings instance."""
    return OnboardingSettings()


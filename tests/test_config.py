"""
Tests for settings and session wiring.
"""

import pytest
from pydantic import ValidationError

from onboarding.config import OnboardingSettings
from onboarding.llm import prompt_logger
from onboarding.llm.client import MockOracleClient
from onboarding.observability import LoggingEmitter, SessionLogger
from onboarding.state import create_session
from onboarding.storage import JsonFileSnapshotStore


class TestOnboardingSettings:
    """Defaults and environment overrides."""

    def test_defaults(self):
        settings = OnboardingSettings(_env_file=None)

        assert settings.oracle_model == "llama-3.1-70b-versatile"
        assert settings.oracle_timeout_seconds == 30.0
        assert settings.completion_threshold == 80
        assert settings.history_limit == 10
        assert settings.autosave_delay_seconds == 1.0
        assert settings.resume_sessions is False
        assert not settings.oracle_configured

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "gsk-test")
        monkeypatch.setenv("OPENAI_BASE_URL", "https://api.groq.com/openai/v1")
        monkeypatch.setenv("COMPLETION_THRESHOLD", "70")
        monkeypatch.setenv("RESUME_SESSIONS", "true")

        settings = OnboardingSettings(_env_file=None)

        assert settings.oracle_configured
        assert settings.openai_base_url == "https://api.groq.com/openai/v1"
        assert settings.completion_threshold == 70
        assert settings.resume_sessions is True

    def test_whitespace_key_is_not_configured(self):
        assert not OnboardingSettings(openai_api_key="   ", _env_file=None).oracle_configured

    def test_threshold_bounds(self):
        with pytest.raises(ValidationError):
            OnboardingSettings(completion_threshold=120, _env_file=None)

    def test_log_prompts_from_env(self, monkeypatch):
        monkeypatch.setenv("ONBOARDING_LOG_PROMPTS", "true")

        assert OnboardingSettings(_env_file=None).onboarding_log_prompts is True


class TestCreateSession:
    """Factory wiring from settings."""

    def test_offline_session(self, tmp_path):
        settings = OnboardingSettings(
            snapshot_path=tmp_path / "session.json",
            completion_threshold=75,
            history_limit=5,
            _env_file=None,
        )

        session = create_session(settings)

        assert isinstance(session.gateway.client, MockOracleClient)
        assert isinstance(session.store, JsonFileSnapshotStore)
        assert session.store.path == tmp_path / "session.json"
        assert isinstance(session.events, LoggingEmitter)
        assert session.completion_threshold == 75
        assert session.history_limit == 5

    def test_event_log_enabled(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = OnboardingSettings(onboarding_event_log=True, snapshot_path=tmp_path / "s.json", _env_file=None)

        session = create_session(settings)

        assert isinstance(session.events, SessionLogger)
        session.close()

    def test_log_prompts_setting_enables_prompt_logger(self, tmp_path, monkeypatch):
        monkeypatch.setattr(prompt_logger, "LOG_DIR", tmp_path / "prompt_logs")
        settings = OnboardingSettings(onboarding_log_prompts=True, snapshot_path=tmp_path / "s.json", _env_file=None)

        try:
            create_session(settings)
            assert prompt_logger.is_enabled()
            assert prompt_logger.log_prompt(model="m", system_prompt="s", user_prompt="u") is not None
        finally:
            prompt_logger.enable_prompt_logging(False)
            prompt_logger.reset_session()

    def test_prompt_logger_off_by_default(self, tmp_path):
        create_session(OnboardingSettings(snapshot_path=tmp_path / "s.json", _env_file=None))

        assert not prompt_logger.is_enabled()

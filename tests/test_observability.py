"""
Tests for telemetry emitters.
"""

import json
import logging

from onboarding.errors import OracleErrorKind
from onboarding.observability import LoggingEmitter, NullEmitter, SessionLogger, safe_emit
from onboarding.observability.session_logger import CLIPPED_TEXT, MAX_ITEMS, MAX_TEXT, compact


class TestTruncation:
    """Large values are shortened before logging."""

    def test_short_values_untouched(self):
        assert compact({"a": 1, "b": "x", "c": [1, 2]}) == {"a": 1, "b": "x", "c": [1, 2]}

    def test_long_string(self):
        result = compact("x" * (MAX_TEXT + 10))
        assert result.startswith("x" * MAX_TEXT)
        assert result.endswith(f"({MAX_TEXT + 10} chars)")

    def test_long_list(self):
        result = compact(list(range(MAX_ITEMS + 3)))
        assert result[-1] == "... +3 more"

    def test_free_text_keys_clipped_harder(self):
        result = compact({"value": "y" * 80, "questionId": "y" * 80})
        assert result["value"] == "y" * CLIPPED_TEXT + "... (80 chars)"
        assert result["questionId"] == "y" * 80

    def test_full_checkbox_answer_kept(self):
        options = [f"option {i}" for i in range(12)]
        assert compact({"value": options}) == {"value": options}

    def test_models_and_enums(self):
        from onboarding.models import CoverageEntry

        assert compact(OracleErrorKind.TIMEOUT) == "timeout"
        assert compact(CoverageEntry(weight=0.5, score=10)) == {"weight": 0.5, "score": 10.0, "unknowns": []}


class TestSessionLogger:
    """JSONL session files."""

    def test_writes_events(self, tmp_path):
        events = SessionLogger(session_id="t1", log_dir=tmp_path)
        events.emit("question.asked", {"questionId": "role-1", "uiKind": "short_text"})
        path = events.close()

        lines = [json.loads(line) for line in open(path, encoding="utf-8")]

        assert [line["event"] for line in lines] == ["session_start", "question.asked", "session_end"]
        assert lines[1]["questionId"] == "role-1"
        assert lines[2]["total_events"] == 1

    def test_disabled(self, tmp_path):
        events = SessionLogger(enabled=False, log_dir=tmp_path)
        events.emit("undo", {})

        assert events.close() is None
        assert list(tmp_path.iterdir()) == []


class TestEmitters:
    """Logging and null sinks."""

    def test_logging_emitter(self, caplog):
        with caplog.at_level(logging.INFO, logger="onboarding.observability.events"):
            LoggingEmitter().emit("undo", {"action": "answer"})

        assert "[telemetry] undo" in caplog.text

    def test_null_emitter(self):
        NullEmitter().emit("undo", {"action": "answer"})

    def test_safe_emit_swallows_sink_errors(self, caplog):
        class Broken(NullEmitter):
            def emit(self, event, data=None):
                raise RuntimeError("down")

        safe_emit(Broken(), "undo", {})

        assert "Telemetry sink failed on undo" in caplog.text


class TestPromptLogger:
    """Markdown dump of each oracle call."""

    def test_disabled_by_default(self):
        from onboarding.llm import prompt_logger

        assert prompt_logger.log_prompt(model="m", system_prompt="s", user_prompt="u") is None

    def test_writes_call_file(self, tmp_path, monkeypatch):
        from onboarding.llm import prompt_logger

        monkeypatch.setattr(prompt_logger, "LOG_DIR", tmp_path)
        prompt_logger.reset_session()
        prompt_logger.enable_prompt_logging(True)
        try:
            path = prompt_logger.log_prompt(
                model="llama", system_prompt="SYS", user_prompt="USER", step=3,
                raw_response='{"question": {}}', duration_ms=120,
            )
        finally:
            prompt_logger.enable_prompt_logging(False)
            prompt_logger.reset_session()

        assert path.name == "01_step03.md"
        text = path.read_text(encoding="utf-8")
        assert "**Model:** llama" in text
        assert "**Duration:** 120 ms" in text
        assert '{"question": {}}' in text

"""
Onboarding - Session Logger.

Appends telemetry events for one questionnaire run to
session_logs/session_<id>.jsonl, one JSON object per line, so a run can be
followed with tail -f. Payloads are compacted first: free-text answers and
rationales are clipped and long option lists are summarized.

Usage:
    from onboarding.observability.session_logger import SessionLogger

    events = SessionLogger()
    session = OnboardingSession(gateway, store, events)
    ...
    events.close()

Line format:
    {"ts": "2026-01-01T17:30:00", "event": "answer.captured", "questionId": "role-1", ...}
"""

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .events import EventEmitter


LOG_DIR = Path("session_logs")

MAX_TEXT = 200
MAX_ITEMS = 12          # a full checkbox_list answer fits
MAX_KEYS = 10           # one coverage map
MAX_DEPTH = 3

# Free-text keys clipped harder than other strings
CLIPPED_KEYS = {"value", "rationale", "prompt", "context"}
CLIPPED_TEXT = 60


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text)} chars)"


def compact(value: Any, depth: int = 0, key: str | None = None) -> Any:
    """Shrink a payload for logging. Models and enums are dumped to plain data first."""
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="json", by_alias=True)
    elif isinstance(value, Enum):
        value = value.value

    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _clip(value, CLIPPED_TEXT if key in CLIPPED_KEYS else MAX_TEXT)
    if depth >= MAX_DEPTH:
        return "<nested>"

    if isinstance(value, (list, tuple, set)):
        items = list(value)
        out = [compact(item, depth + 1) for item in items[:MAX_ITEMS]]
        if len(items) > MAX_ITEMS:
            out.append(f"... +{len(items) - MAX_ITEMS} more")
        return out

    if isinstance(value, dict):
        keys = list(value)
        out = {str(k): compact(value[k], depth + 1, str(k)) for k in keys[:MAX_KEYS]}
        if len(keys) > MAX_KEYS:
            out["_truncated"] = f"+{len(keys) - MAX_KEYS} keys"
        return out

    return _clip(str(value), MAX_TEXT)


class SessionLogger(EventEmitter):
    """
    JSONL telemetry sink for a single session.

    Args:
        session_id: File name suffix. Defaults to a timestamp.
        enabled: When False nothing is written.
        log_dir: Directory for the file. Defaults to LOG_DIR.
    """

    def __init__(self, session_id: str | None = None, enabled: bool = True, log_dir: Path | None = None):
        self.enabled = enabled
        self.session_id = session_id or datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_path: Path | None = None
        self._file = None
        self._count = 0

        if enabled:
            directory = log_dir or LOG_DIR
            directory.mkdir(parents=True, exist_ok=True)
            self.log_path = directory / f"session_{self.session_id}.jsonl"
            self._file = self.log_path.open("a", encoding="utf-8")
            self._append("session_start", {"session_id": self.session_id})

    def _append(self, event: str, payload: dict) -> None:
        if self._file is None:
            return
        line = {"ts": datetime.now().isoformat(), "event": event, **payload}
        self._file.write(json.dumps(line, default=str) + "\n")
        self._file.flush()

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        self._count += 1
        self._append(event, compact(data or {}))

    def close(self) -> str | None:
        """Write the session_end line and close. Returns the file path."""
        if self._file is None:
            return None
        self._append("session_end", {"total_events": self._count})
        self._file.close()
        self._file = None
        return str(self.log_path)

"""
Pytest configuration and fixtures for onboarding tests.
"""

import asyncio
import json
import os
from typing import Any
from unittest.mock import MagicMock

import pytest

# Set test environment before importing onboarding modules
os.environ["ONBOARDING_ENV"] = "development"
os.environ["OPENAI_API_KEY"] = ""
os.environ["ONBOARDING_LOG_PROMPTS"] = "0"

from onboarding.llm.client import OracleClient
from onboarding.models import CoverageEntry
from onboarding.observability.events import EventEmitter
from onboarding.oracle import QuestionOracleGateway
from onboarding.state import OnboardingSession
from onboarding.storage import InMemorySnapshotStore


def run(coro):
    """Run a coroutine to completion in a fresh event loop."""
    return asyncio.run(coro)


def make_response(
    question_id: str = "q-1",
    targets: list[str] | None = None,
    kind: str = "short_text",
    coverage_update: dict[str, Any] | None = None,
    tracks: list[dict] | None = None,
    rationale: str | None = None,
) -> dict:
    """Oracle response body in wire format."""
    ui: dict[str, Any] = {"kind": kind}
    if kind in ("chips", "checkbox_list", "toggle_pair"):
        ui["options"] = ["A", "B", "C"]
    elif kind == "range":
        ui.update(min=1, max=10)

    body: dict[str, Any] = {
        "question": {
            "id": question_id,
            "prompt": f"Question {question_id}?",
            "ui": ui,
            "targets": targets or ["role"],
        },
        "coverageUpdate": coverage_update or {},
        "tracks": tracks or [],
    }
    if rationale is not None:
        body["rationale"] = rationale
    return body


class ScriptedOracleClient(OracleClient):
    """
    Oracle fake that replays a script.

    Each entry is raw text, a dict (dumped to JSON) or an exception to
    raise. Once the script runs out, numbered default questions are served.
    """

    def __init__(self, script: list | None = None):
        self.script = list(script or [])
        self.calls: list[dict] = []

    async def complete(self, *, system_prompt: str, user_prompt: str, step: int) -> str:
        self.calls.append({"system_prompt": system_prompt, "user_prompt": user_prompt, "step": step})
        if not self.script:
            return json.dumps(make_response(question_id=f"auto-{len(self.calls)}"))

        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, dict):
            return json.dumps(item)
        return item


class SlowOracleClient(OracleClient):
    """Oracle fake that never answers within any sensible timeout."""

    async def complete(self, *, system_prompt: str, user_prompt: str, step: int) -> str:
        await asyncio.sleep(10)
        return json.dumps(make_response())


class RecordingEmitter(EventEmitter):
    """Keeps every emitted event for assertions."""

    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def emit(self, event: str, data: dict | None = None) -> None:
        self.events.append((event, data or {}))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def of(self, event: str) -> list[dict]:
        return [data for name, data in self.events if name == event]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def oracle():
    """Scripted oracle with an empty script (serves default questions)."""
    return ScriptedOracleClient()


@pytest.fixture
def store():
    return InMemorySnapshotStore()


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def make_session(oracle, store, emitter):
    """Factory for sessions wired to the scripted oracle, in-memory store and recorder."""

    def _make(script: list | None = None, **kwargs) -> OnboardingSession:
        if script is not None:
            oracle.script = list(script)
        kwargs.setdefault("autosave_delay", 0)
        return OnboardingSession(QuestionOracleGateway(oracle, timeout_seconds=5), store, emitter, **kwargs)

    return _make


@pytest.fixture
def single_dimension_coverage():
    return {"role": CoverageEntry(weight=0.8, score=0, unknowns=[])}


@pytest.fixture
def mock_openai():
    """Mock AsyncOpenAI client for unit tests."""
    mock_client = MagicMock()
    mock_completion = MagicMock()
    mock_completion.choices = [MagicMock(message=MagicMock(content=json.dumps(make_response())))]

    async def create(**kwargs):
        return mock_completion

    mock_client.chat.completions.create = MagicMock(side_effect=create)
    return mock_client

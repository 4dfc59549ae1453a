"""
Telemetry events.

The session reports what happens (questions asked, answers captured,
milestones) to an EventEmitter. Emitting is fire-and-forget: a failing sink
is logged and never interrupts the questionnaire.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


# Event names
ONBOARDING_VIEW = "onboarding.view"
QUESTION_ASKED = "question.asked"
ANSWER_CAPTURED = "answer.captured"
COVERAGE_UPDATED = "coverage.updated"
TRACKS_UPDATED = "tracks.updated"
TRACK_ACCEPTED = "tracks.accepted"
TRACK_SWAPPED = "tracks.swapped"
UNDO = "undo"
SAVE_RESUME = "save.resume"
ORACLE_FAILED = "oracle.failed"
STEP_COMPLETED = "progress.step_completed"
STEP_SKIPPED = "progress.step_skipped"
DIMENSION_MILESTONE = "progress.dimension_milestone"
COMPLETION_REACHED = "progress.completion_reached"


class EventEmitter:
    """Base emitter. Subclasses override emit(); the default drops events."""

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        pass

    def close(self) -> str | None:
        return None


class NullEmitter(EventEmitter):
    """Discards every event."""


class LoggingEmitter(EventEmitter):
    """Writes events to the standard logger."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        logger.log(self.level, f"[telemetry] {event}: {data or {}}")


def safe_emit(emitter: EventEmitter, event: str, data: dict[str, Any] | None = None) -> None:
    """Emit without letting a broken sink reach the caller."""
    try:
        emitter.emit(event, data)
    except Exception as e:
        logger.warning(f"Telemetry sink failed on {event}: {e}")

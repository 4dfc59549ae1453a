"""
Onboarding State Machine.

OnboardingSession owns the session data and drives the question loop:
answer (or skip, or quick pick) -> local coverage bump -> oracle round trip
-> next question. Every data change recomputes progress, re-derives
completion and schedules a debounced snapshot save.

Status moves idle -> thinking -> retrieving -> assembling -> idle during a
round trip. Only one round trip runs at a time; actions arriving mid-flight
are rejected with SessionBusyError.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .config import OnboardingSettings, get_settings
from .coverage import calculate_progress, next_focus_dimension, strongest_dimensions, update_coverage
from .errors import OracleError, SessionBusyError
from .llm.client import get_oracle_client
from .llm.prompt_logger import enable_prompt_logging
from .models import (
    Answer,
    AnswerValue,
    CoverageEntry,
    OnboardingData,
    ProgressMilestone,
    Question,
    QuickPick,
    Track,
    answer_text,
)
from .observability import events as ev
from .observability.events import EventEmitter, LoggingEmitter, NullEmitter, safe_emit
from .observability.session_logger import SessionLogger
from .oracle import QuestionOracleGateway
from .storage import DebouncedSaver, InMemorySnapshotStore, JsonFileSnapshotStore, SnapshotStore

logger = logging.getLogger(__name__)


ANSWER_SCORE_STEP = 25
QUICK_PICK_SCORE_STEP = 20
MILESTONE_SCORE = 50


class OnboardingStatus(Enum):
    """Where a question round trip currently is."""
    IDLE = "idle"
    THINKING = "thinking"        # Building the oracle request
    RETRIEVING = "retrieving"    # Waiting on the oracle
    ASSEMBLING = "assembling"    # Merging coverage, publishing the question


@dataclass
class ProgressSummary:
    """Snapshot of progress for display."""
    current_step: int
    total_steps: int
    progress_percent: int
    is_complete: bool
    next_milestone: str | None = None

    def to_dict(self) -> dict:
        return {
            "currentStep": self.current_step,
            "totalSteps": self.total_steps,
            "progressPercent": self.progress_percent,
            "isComplete": self.is_complete,
            "nextMilestone": self.next_milestone,
        }


class OnboardingSession:
    """
    One user's questionnaire.

    Args:
        gateway: Source of next questions
        store: Snapshot persistence (load/save/clear)
        events: Telemetry sink; defaults to a NullEmitter
        completion_threshold: Progress percent at which the session is complete
        history_limit: Max snapshots kept for undo
        estimated_total_steps: Shown in the progress summary
        autosave_delay: Debounce for snapshot writes, in seconds
    """

    def __init__(
        self,
        gateway: QuestionOracleGateway,
        store: SnapshotStore | None = None,
        events: EventEmitter | None = None,
        *,
        completion_threshold: int = 80,
        history_limit: int = 10,
        estimated_total_steps: int = 8,
        autosave_delay: float = 1.0,
    ) -> None:
        self.gateway = gateway
        self.store = store or InMemorySnapshotStore()
        self.events = events or NullEmitter()
        self.saver = DebouncedSaver(self.store, autosave_delay)

        self.completion_threshold = completion_threshold
        self.history_limit = history_limit
        self.estimated_total_steps = estimated_total_steps

        self.data = OnboardingData()
        self.current_question: Question | None = None
        self.current_question_rationale: str | None = None
        self.status = OnboardingStatus.IDLE
        self.history: list[OnboardingData] = [self.data.model_copy(deep=True)]
        self.current_step = 0
        self.milestones: list[ProgressMilestone] = []
        self.is_complete = False

    # =========================================================================
    # Internals
    # =========================================================================

    @property
    def is_busy(self) -> bool:
        return self.status is not OnboardingStatus.IDLE

    def _ensure_idle(self, action: str) -> None:
        if self.is_busy:
            raise SessionBusyError(f"Cannot {action} while a question is loading ({self.status.value})")

    def _emit(self, event: str, **data: Any) -> None:
        safe_emit(self.events, event, data)

    def _update_data(self, **changes: Any) -> None:
        """Apply changes, recompute progress, re-derive completion, schedule a save."""
        data = self.data.model_copy(update=changes)
        data.progress_percent = calculate_progress(data.coverage)
        self.data = data
        self.check_completion()
        self.saver.schedule(self.data)

    def _save_to_history(self) -> None:
        self.history.append(self.data.model_copy(deep=True))
        if len(self.history) > self.history_limit:
            del self.history[: len(self.history) - self.history_limit]

    def _start_fresh(self) -> None:
        self.data = OnboardingData()
        self.history = [self.data.model_copy(deep=True)]
        self.current_question = None
        self.current_question_rationale = None
        self.status = OnboardingStatus.IDLE
        self.current_step = 0
        self.milestones = []
        self.is_complete = False

    def _clear_snapshot(self) -> None:
        self.saver.cancel()
        try:
            self.store.clear()
        except OSError as e:
            logger.error(f"Failed to clear onboarding snapshot: {e}")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self, resume: bool = False) -> None:
        """
        Start a session and fetch the first question.

        By default any saved snapshot is wiped. With resume=True a saved
        snapshot is restored instead (and kept) when one exists.
        """
        self._ensure_idle("initialize")

        snapshot = self.store.load() if resume else None
        self._start_fresh()

        if snapshot is not None:
            snapshot.progress_percent = calculate_progress(snapshot.coverage)
            self.data = snapshot
            self.history = [snapshot.model_copy(deep=True)]
            self.current_step = len(snapshot.answers)
            self.is_complete = snapshot.progress_percent >= self.completion_threshold
            logger.info(f"Resumed onboarding at step {self.current_step} ({snapshot.progress_percent}%)")
            self._emit(ev.SAVE_RESUME, answers=len(snapshot.answers), progressPercent=snapshot.progress_percent)
        else:
            self._clear_snapshot()

        self._emit(ev.ONBOARDING_VIEW, step=self.current_step)
        await self._fetch()

    def reset(self) -> None:
        """Back to initial data without fetching a question. Clears the snapshot."""
        self._ensure_idle("reset")
        self._start_fresh()
        self._clear_snapshot()
        logger.info("Onboarding session reset")

    def close(self) -> None:
        """Write any pending snapshot and close the telemetry sink."""
        self.saver.flush()
        self.events.close()

    # =========================================================================
    # Question Round Trip
    # =========================================================================

    async def fetch_next_question(self) -> None:
        """Ask the oracle for the next question. Failures leave no current question."""
        self._ensure_idle("fetch a question")
        await self._fetch()

    async def _fetch(self) -> None:
        try:
            self.status = OnboardingStatus.THINKING
            data = self.data

            self.status = OnboardingStatus.RETRIEVING
            response = await self.gateway.request_next_question(data.profile, data.coverage, data.answers)

            self.status = OnboardingStatus.ASSEMBLING
            # Coverage lands before the question is visible
            self._update_data(
                coverage=update_coverage(self.data.coverage, response.coverage_update),
                tracks=list(response.tracks),
            )
            if response.tracks:
                self._emit(ev.TRACKS_UPDATED, trackIds=[t.id for t in response.tracks])

            self.current_question = response.question
            self.current_question_rationale = response.rationale
            self._emit(ev.QUESTION_ASKED, questionId=response.question.id, uiKind=response.question.ui.kind)
        except OracleError as e:
            logger.error(f"Failed to fetch next question: {e.kind.value}: {e}")
            self._emit(ev.ORACLE_FAILED, kind=e.kind.value)
            self.current_question = None
        except Exception as e:
            logger.exception(f"Failed to fetch next question: {e}")
            self.current_question = None
        finally:
            self.status = OnboardingStatus.IDLE

    # =========================================================================
    # User Actions
    # =========================================================================

    async def answer_question(self, value: AnswerValue) -> None:
        """
        Record an answer to the current question and move on.

        Each target dimension gains up to 25 points and drops the unknowns
        mentioned in the answer. No-op when there is no current question.
        """
        self._ensure_idle("answer")
        question = self.current_question
        if question is None:
            return

        # Validate before touching history so a rejected value leaves no snapshot behind
        answer = Answer(question_id=question.id, value=value)
        self._save_to_history()
        self._update_data(answers=[*self.data.answers, answer])
        self.current_step = len(self.data.answers)
        self._emit(ev.ANSWER_CAPTURED, questionId=question.id, valueType=type(value).__name__, value=value)

        text = answer_text(answer.value).lower()
        updates: dict[str, CoverageEntry] = {}
        for dimension in question.targets:
            current = self.data.coverage.get(dimension)
            if current is None:
                continue
            new_score = min(100.0, current.score + min(ANSWER_SCORE_STEP, 100 - current.score))
            updates[dimension] = current.model_copy(update={
                "score": new_score,
                "unknowns": [u for u in current.unknowns if u.lower() not in text],
            })
            if current.score < MILESTONE_SCORE <= new_score:
                self._record_milestone(dimension, new_score)

        if updates:
            previous = self.data.coverage
            self._update_data(coverage=update_coverage(previous, updates))
            for dimension, entry in updates.items():
                self._emit(ev.COVERAGE_UPDATED, dimension=dimension, previousScore=previous[dimension].score, newScore=entry.score)

        self._emit(ev.STEP_COMPLETED, step=self.current_step, questionId=question.id, targets=list(question.targets))
        await self._fetch()

    async def skip_question(self) -> None:
        """Advance the step counter without answering, then fetch."""
        self._ensure_idle("skip")
        self.current_step += 1
        self._emit(ev.STEP_SKIPPED, step=self.current_step)
        await self._fetch()

    async def handle_quick_pick(self, pick: QuickPick) -> None:
        """Record a predefined answer worth 20 points per target, then fetch."""
        self._ensure_idle("apply a quick pick")
        answer = Answer(question_id=f"quickpick-{pick.id}", value=pick.value)
        self._save_to_history()
        self._update_data(answers=[*self.data.answers, answer])
        self.current_step = len(self.data.answers)

        updates = {
            dimension: {"score": min(100.0, self.data.coverage[dimension].score + QUICK_PICK_SCORE_STEP)}
            for dimension in pick.targets
            if dimension in self.data.coverage
        }
        if updates:
            self._update_data(coverage=update_coverage(self.data.coverage, updates))

        self._emit(ev.ANSWER_CAPTURED, questionId=answer.question_id, valueType="quickpick", value=pick.value)
        await self._fetch()

    def undo(self) -> None:
        """
        Restore the state from just before the last answer or quick pick.

        The oldest history entry is never consumed, so undo is a no-op until
        an action has pushed a snapshot.
        """
        self._ensure_idle("undo")
        if len(self.history) <= 1:
            return

        previous = self.history.pop().model_copy(deep=True)
        self.data = previous
        self.current_question = None
        self.current_question_rationale = None
        self.current_step = len(previous.answers)
        self.is_complete = previous.progress_percent >= self.completion_threshold
        self.saver.schedule(self.data)
        self._emit(ev.UNDO, action="answer")

    # =========================================================================
    # Progress
    # =========================================================================

    def _record_milestone(self, dimension: str, score: float) -> None:
        self.milestones.append(ProgressMilestone(step=self.current_step, dimension=dimension, score=score))
        self._emit(ev.DIMENSION_MILESTONE, dimension=dimension, score=score)

    def check_completion(self) -> bool:
        """Re-derive is_complete; the first crossing of the threshold emits completion_reached."""
        is_complete = self.data.progress_percent >= self.completion_threshold
        if is_complete and not self.is_complete:
            coverage = self.data.coverage
            self._emit(
                ev.COMPLETION_REACHED,
                finalScore=self.data.progress_percent,
                totalAnswers=len(self.data.answers),
                topDimensions=[
                    {"name": d, "score": coverage[d].score} for d in strongest_dimensions(coverage, 3)
                ],
            )
            logger.info(f"Onboarding complete at {self.data.progress_percent}%")
        self.is_complete = is_complete
        return is_complete

    def progress_summary(self) -> ProgressSummary:
        return ProgressSummary(
            current_step=self.current_step,
            total_steps=self.estimated_total_steps,
            progress_percent=self.data.progress_percent,
            is_complete=self.is_complete,
            next_milestone=next_focus_dimension(self.data.coverage),
        )

    # =========================================================================
    # Tracks
    # =========================================================================

    def accept_track(self, track_id: str) -> Track | None:
        """Mark a recommended track as accepted. Only reports the event."""
        track = next((t for t in self.data.tracks if t.id == track_id), None)
        if track is None:
            logger.warning(f"accept_track: unknown track {track_id!r}")
            return None
        self._emit(ev.TRACK_ACCEPTED, trackId=track_id)
        logger.info(f"Accepted track: {track.title}")
        return track

    def swap_track(self, track_id: str) -> None:
        """Ask for an alternative to a track. Only reports the event."""
        self._emit(ev.TRACK_SWAPPED, trackId=track_id)
        logger.info(f"Swapping track: {track_id}")


# =============================================================================
# Factory
# =============================================================================


def create_session(settings: OnboardingSettings | None = None) -> OnboardingSession:
    """Wire a session from settings: oracle client, snapshot file, telemetry sink."""
    settings = settings or get_settings()
    if settings.onboarding_log_prompts:
        enable_prompt_logging(True)

    gateway =QuestionOracleGateway(get_oracle_client(settings), timeout_seconds=settings.oracle_timeout_seconds)
    events: EventEmitter = SessionLogger() if settings.onboarding_event_log else LoggingEmitter()

    return OnboardingSession(
        gateway,
        JsonFileSnapshotStore(settings.snapshot_path),
        events,
        completion_threshold=settings.completion_threshold,
        history_limit=settings.history_limit,
        estimated_total_steps=settings.estimated_total_steps,
        autosave_delay=settings.autosave_delay_seconds,
    )

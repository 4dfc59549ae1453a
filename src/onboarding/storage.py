"""
Session Snapshot Storage.

A single named record holding the whole OnboardingData as one JSON blob.
The session saves through a DebouncedSaver so bursts of updates collapse
into one write (most recent wins).
"""

import asyncio
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from .models import OnboardingData

logger = logging.getLogger(__name__)


class SnapshotStore(ABC):
    """load / save / clear contract for the session snapshot."""

    @abstractmethod
    def load(self) -> OnboardingData | None:
        """Return the saved snapshot, or None if there is none (or it is unreadable)."""

    @abstractmethod
    def save(self, data: OnboardingData) -> None:
        """Replace the snapshot with data in a single write."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the snapshot. No-op when nothing is saved."""


class InMemorySnapshotStore(SnapshotStore):
    """Keeps the serialized snapshot in memory. The default store for OnboardingSession."""

    def __init__(self) -> None:
        self._blob: str | None = None
        self.save_count = 0

    def load(self) -> OnboardingData | None:
        if self._blob is None:
            return None
        return OnboardingData.from_json(self._blob)

    def save(self, data: OnboardingData) -> None:
        self._blob = data.to_json()
        self.save_count += 1

    def clear(self) -> None:
        self._blob = None


class JsonFileSnapshotStore(SnapshotStore):
    """
    Snapshot stored as a JSON file.

    Writes go to a temp file in the same directory and are moved into
    place with os.replace, so readers never see a partial file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> OnboardingData | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read snapshot {self.path}: {e}")
            return None

        try:
            return OnboardingData.from_json(raw)
        except ValidationError as e:
            logger.error(f"Discarding unreadable snapshot {self.path}: {e.error_count()} errors")
            return None

    def save(self, data: OnboardingData) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(data.to_json())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class DebouncedSaver:
    """
    Coalesces snapshot writes.

    schedule() restarts the delay each call; only the most recent data is
    written once the delay passes. Outside a running event loop the write
    happens immediately.
    """

    def __init__(self, store: SnapshotStore, delay_seconds: float = 1.0) -> None:
        self.store = store
        self.delay_seconds = delay_seconds
        self._pending: OnboardingData | None = None
        self._task: asyncio.Task | None = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, data: OnboardingData) -> None:
        self._pending = data.model_copy(deep=True)
        self._cancel_task()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write_pending()
            return

        if self.delay_seconds <= 0:
            self._write_pending()
            return
        self._task = loop.create_task(self._write_later())

    async def _write_later(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        self._task = None
        self._write_pending()

    def _write_pending(self) -> None:
        data, self._pending = self._pending, None
        if data is None:
            return
        try:
            self.store.save(data)
        except OSError as e:
            logger.error(f"Failed to save onboarding snapshot: {e}")

    def flush(self) -> None:
        """Write any pending snapshot now."""
        self._cancel_task()
        self._write_pending()

    def cancel(self) -> None:
        """Drop any pending snapshot without writing it."""
        self._cancel_task()
        self._pending = None

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

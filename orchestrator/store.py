"""Single-owner run status tracker with a dedicated status writer."""

from __future__ import annotations

from datetime import datetime
import logging
from threading import Lock
from typing import Callable, Optional

from core import RunState, RunStatus, utcnow


logger = logging.getLogger(__name__)

StatusWriter = Callable[[RunStatus], None]

_ALLOWED_TRANSITIONS = {
    RunState.IDLE: {RunState.RUNNING},
    RunState.RUNNING: {RunState.SUCCESS, RunState.ERROR},
    RunState.SUCCESS: set(),
    RunState.ERROR: set(),
}


class RunStatusTracker:
    """
    Owns the mutable RunStatus of one run.

    Lifecycle is idle -> running -> success|error; any other transition raises
    ValueError. currentIndex never decreases. Every change rewrites the whole
    record through the writer.
    """

    def __init__(
        self,
        writer: Optional[StatusWriter] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._status = RunStatus()
        self._writer = writer
        self._clock = clock
        self._lock = Lock()

    @property
    def status(self) -> RunStatus:
        return self.snapshot()

    @property
    def state(self) -> RunState:
        return self._status.status

    def snapshot(self) -> RunStatus:
        with self._lock:
            return self._status.model_copy(deep=True)

    def start(self, total: int = 0, message: str = "Run started.") -> RunStatus:
        with self._lock:
            self._transition(RunState.RUNNING)
            now = self._clock()
            self._status.started_at = now
            self._status.finished_at = None
            self._status.total_count = max(0, int(total))
            self._status.current_index = 0
            self._status.current_title = ""
            self._status.updated_count = 0
            self._status.skipped_count = 0
            return self._commit(message, now)

    def set_total(self, total: int, message: Optional[str] = None) -> RunStatus:
        with self._lock:
            self._require_running("set_total")
            self._status.total_count = max(0, int(total))
            return self._commit(message or f"Processing {self._status.total_count} original article(s).")

    def begin_item(self, index: int, title: str) -> RunStatus:
        with self._lock:
            self._require_running("begin_item")
            if index < self._status.current_index:
                raise ValueError(
                    f"currentIndex cannot decrease ({self._status.current_index} -> {index})"
                )
            self._status.current_index = index
            self._status.current_title = title
            return self._commit(f"Processing {index}/{self._status.total_count}: {title}")

    def note(self, message: str) -> RunStatus:
        with self._lock:
            self._require_running("note")
            return self._commit(message)

    def record_updated(self, title: str) -> RunStatus:
        with self._lock:
            self._require_running("record_updated")
            self._status.updated_count += 1
            return self._commit(f"Published updated article for '{title}'.")

    def record_skipped(self, title: str, reason: str) -> RunStatus:
        with self._lock:
            self._require_running("record_skipped")
            self._status.skipped_count += 1
            return self._commit(f"Skipped '{title}': {reason}")

    def complete(self, message: str = "Run completed.") -> RunStatus:
        return self._finish(RunState.SUCCESS, message)

    def fail(self, message: str) -> RunStatus:
        return self._finish(RunState.ERROR, message)

    def _finish(self, state: RunState, message: str) -> RunStatus:
        with self._lock:
            self._transition(state)
            now = self._clock()
            self._status.finished_at = now
            return self._commit(message, now)

    def _transition(self, target: RunState) -> None:
        current = self._status.status
        if target not in _ALLOWED_TRANSITIONS[current]:
            raise ValueError(f"Invalid run status transition: {current.value} -> {target.value}")
        self._status.status = target

    def _require_running(self, operation: str) -> None:
        if self._status.status != RunState.RUNNING:
            raise ValueError(f"{operation} requires a running status, got {self._status.status.value}")

    def _commit(self, message: str, now: Optional[datetime] = None) -> RunStatus:
        self._status.message = message
        self._status.last_updated_at = now or self._clock()
        snapshot = self._status.model_copy(deep=True)
        if self._writer is not None:
            self._writer(snapshot)
        logger.debug("Run status: %s (%s)", snapshot.status.value, message)
        return snapshot

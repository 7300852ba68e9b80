"""Thread-safe progress status of a running batch, read by polling."""

import threading
import time
from typing import Optional

from payee_core.classification.constants import BatchState


class BatchStatus:
    """Progress of one batch.

    Worker threads call ``advance``; readers call ``snapshot`` which returns
    a plain dict copy, so no reader ever sees a half-updated state.
    """

    def __init__(self, batch_id: str, total: int = 0):
        self.batch_id = batch_id
        self._total = total
        self._processed = 0
        self._failed = 0
        self._state = BatchState.PENDING
        self._error: Optional[str] = None
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None
        self._lock = threading.Lock()

    def start(self, total: int) -> None:
        with self._lock:
            self._total = total
            self._processed = 0
            self._failed = 0
            self._state = BatchState.RUNNING
            self._started_at = time.time()

    def advance(self, failed: bool = False) -> None:
        with self._lock:
            self._processed += 1
            if failed:
                self._failed += 1

    def complete(self, cancelled: bool = False) -> None:
        with self._lock:
            self._state = BatchState.CANCELLED if cancelled else BatchState.COMPLETED
            self._finished_at = time.time()

    def fail(self, error: str) -> None:
        with self._lock:
            self._state = BatchState.FAILED
            self._error = error
            self._finished_at = time.time()

    @property
    def state(self) -> str:
        with self._lock:
            return self._state

    @property
    def is_finished(self) -> bool:
        return self.state in BatchState.TERMINAL

    def snapshot(self) -> dict:
        with self._lock:
            percent = (self._processed / self._total * 100) if self._total else 0.0
            end = self._finished_at or time.time()
            elapsed = (end - self._started_at) if self._started_at else 0.0
            return {
                "batch_id": self.batch_id,
                "state": self._state,
                "total": self._total,
                "processed": self._processed,
                "failed": self._failed,
                "percent_complete": round(percent, 1),
                "elapsed_seconds": round(elapsed, 2),
                "error": self._error,
            }

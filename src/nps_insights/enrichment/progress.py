"""
Progress tracker for enrichment runs.

One instance per application (held on ``app.state``); tests create their
own. Writers are the run's workers, readers are status polls, so every
access goes through a lock and readers get immutable snapshots.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from nps_insights.enrichment.exceptions import EnrichmentBusyError
from nps_insights.models.progress_models import ProgressSnapshot

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressTracker:
    """
    Counter of rows attempted by the current (or last) run.

    Invariants: ``0 <= processed <= total``; ``in_progress`` is true
    strictly between start_processing and complete_processing.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._state = ProgressSnapshot()

    def start_processing(self, total: int, run_id: Optional[str] = None) -> str:
        """
        Reset the counter for a new run and mark it in progress.

        Raises:
            EnrichmentBusyError: another run has not completed yet
            ValueError: negative total
        """
        if total < 0:
            raise ValueError("total must be >= 0")
        run_id = run_id or uuid.uuid4().hex[:12]
        with self._lock:
            if self._state.in_progress:
                raise EnrichmentBusyError(self._state.run_id)
            now = self._clock()
            self._state = ProgressSnapshot(
                run_id=run_id,
                total=total,
                processed=0,
                in_progress=True,
                cancelled=False,
                start_time=now,
                last_update=now,
            )
        logger.info("Progress started", run_id=run_id, total=total)
        return run_id

    def increment_processed(self) -> ProgressSnapshot:
        """Count one attempted row (success or failure)."""
        with self._lock:
            state = self._state
            processed = min(state.processed + 1, state.total)
            self._state = state.model_copy(
                update={"processed": processed, "last_update": self._clock()}
            )
            return self._state

    def complete_processing(self, cancelled: bool = False) -> ProgressSnapshot:
        with self._lock:
            self._state = self._state.model_copy(
                update={"in_progress": False, "cancelled": cancelled, "last_update": self._clock()}
            )
            snapshot = self._state
        logger.info(
            "Progress completed",
            run_id=snapshot.run_id,
            processed=snapshot.processed,
            total=snapshot.total,
            cancelled=cancelled,
        )
        return snapshot

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            return self._state

    def progress_percent(self) -> int:
        return self.snapshot().progress

    def is_processing(self) -> bool:
        with self._lock:
            return self._state.in_progress

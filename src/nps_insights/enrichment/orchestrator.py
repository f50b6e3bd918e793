"""
Enrichment orchestrator: pending rows -> classification -> store.

Run lifecycle: IDLE -> SCANNING -> RUNNING -> IDLE.

- Admission is an atomic check-and-set; a second trigger gets
  EnrichmentBusyError instead of racing the first.
- Store failure while scanning aborts the trigger (StoreUnavailableError).
- An empty scan returns to IDLE without touching the progress tracker.
- Rows are queued and consumed by a small worker pool (1 worker =
  strictly sequential), with a throttle delay between rows.
- Per-row failures are logged and counted; the run always completes.
"""

import asyncio
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import structlog

from nps_insights.classification.client import ClassificationClient
from nps_insights.config import Settings
from nps_insights.enrichment.exceptions import EnrichmentBusyError, NoActiveRunError
from nps_insights.enrichment.progress import ProgressTracker
from nps_insights.models.classification_models import (
    CommentOutcome,
    Fallback,
    FallbackReason,
    Structured,
)
from nps_insights.models.survey_models import EnrichmentUpdate, PendingRow
from nps_insights.monitoring.metrics import enrichment_rows_total, enrichment_runs_total
from nps_insights.persistence.exceptions import StoreUnavailableError
from nps_insights.persistence.repository import ResponseRepository

logger = structlog.get_logger(__name__)

# Degradations where the model never produced an answer for the row
_NO_ANSWER = (FallbackReason.TRANSPORT, FallbackReason.ERROR)


class RunState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    RUNNING = "running"


@dataclass(frozen=True)
class RunTicket:
    """Acknowledgment returned to a trigger."""
    run_id: Optional[str]
    total: int

    @property
    def started(self) -> bool:
        return self.run_id is not None


@dataclass
class EnrichmentReport:
    """Final tally of one run."""
    run_id: Optional[str]
    total: int
    processed: int = 0
    enriched: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False


@dataclass
class _RunContext:
    run_id: str
    rows: list[PendingRow]
    report: EnrichmentReport
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)


class EnrichmentOrchestrator:
    """
    Drives enrichment runs over the pending rows of the response store.
    """

    def __init__(
        self,
        repository: ResponseRepository,
        classifier: ClassificationClient,
        tracker: ProgressTracker,
        workers: int = 1,
        row_delay: float = 0.1,
        model_confidence: float = 0.8,
    ):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.repository = repository
        self.classifier = classifier
        self.tracker = tracker
        self.workers = workers
        self.row_delay = row_delay
        self.model_confidence = model_confidence

        self._lock = threading.Lock()
        self._state = RunState.IDLE
        self._current: Optional[_RunContext] = None
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        repository: ResponseRepository,
        classifier: ClassificationClient,
        tracker: ProgressTracker,
    ) -> "EnrichmentOrchestrator":
        return cls(
            repository=repository,
            classifier=classifier,
            tracker=tracker,
            workers=settings.ENRICHMENT_WORKERS,
            row_delay=settings.ENRICHMENT_ROW_DELAY_SECONDS,
            model_confidence=settings.MODEL_SENTIMENT_CONFIDENCE,
        )

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def current_run_id(self) -> Optional[str]:
        with self._lock:
            return self._current.run_id if self._current else None

    # === Admission ===

    def _set_idle(self) -> None:
        with self._lock:
            self._state = RunState.IDLE
            self._current = None

    def _admit(self, force: bool) -> Optional[_RunContext]:
        """
        Atomically claim the run slot, scan the store and start the tracker.

        Returns None when there is nothing to do (slot released again).
        """
        with self._lock:
            if self._state is not RunState.IDLE or self.tracker.is_processing():
                enrichment_runs_total.labels(outcome="rejected").inc()
                raise EnrichmentBusyError(self._current.run_id if self._current else None)
            self._state = RunState.SCANNING

        try:
            rows = self.repository.get_pending_for_enrichment(force=force)
        except StoreUnavailableError:
            self._set_idle()
            enrichment_runs_total.labels(outcome="store_unavailable").inc()
            logger.error("Enrichment scan failed, run not started", force=force)
            raise
        except BaseException:
            self._set_idle()
            raise

        if not rows:
            self._set_idle()
            enrichment_runs_total.labels(outcome="empty").inc()
            logger.info("No pending rows, nothing to enrich", force=force)
            return None

        run_id = uuid.uuid4().hex[:12]
        try:
            self.tracker.start_processing(len(rows), run_id=run_id)
        except BaseException:
            self._set_idle()
            raise

        ctx = _RunContext(
            run_id=run_id,
            rows=rows,
            report=EnrichmentReport(run_id=run_id, total=len(rows)),
        )
        with self._lock:
            self._state = RunState.RUNNING
            self._current = ctx
        logger.info("Enrichment run admitted", run_id=run_id, total=len(rows), force=force, workers=self.workers)
        return ctx

    async def start(self, force: bool = False) -> RunTicket:
        """
        Admit a run and hand it off to a background task.

        Returns immediately; poll the progress tracker for completion.

        Raises:
            EnrichmentBusyError: a run is already active
            StoreUnavailableError: pending rows could not be read
        """
        ctx = self._admit(force)
        if ctx is None:
            return RunTicket(run_id=None, total=0)

        self._task = asyncio.create_task(self._execute(ctx), name=f"enrichment-{ctx.run_id}")
        self._task.add_done_callback(self._log_task_exit)
        return RunTicket(run_id=ctx.run_id, total=len(ctx.rows))

    async def run(self, force: bool = False) -> EnrichmentReport:
        """Admit a run and await its completion (scripts and tests)."""
        ctx = self._admit(force)
        if ctx is None:
            return EnrichmentReport(run_id=None, total=0)
        return await self._execute(ctx)

    def cancel(self) -> str:
        """
        Ask the active run to stop after the rows currently in flight.

        Raises:
            NoActiveRunError: nothing is running
        """
        with self._lock:
            ctx = self._current
        if ctx is None:
            raise NoActiveRunError()
        ctx.cancel_event.set()
        logger.info("Enrichment cancellation requested", run_id=ctx.run_id)
        return ctx.run_id

    async def wait(self) -> Optional[EnrichmentReport]:
        """Await the background run started by ``start`` (if any)."""
        task = self._task
        if task is None:
            return None
        return await asyncio.shield(task)

    async def shutdown(self) -> None:
        """Cancel and drain the background run on application shutdown."""
        task = self._task
        if task is None or task.done():
            return
        with self._lock:
            if self._current:
                self._current.cancel_event.set()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        # A task cancelled before its first step never reaches _execute's cleanup
        if self.tracker.is_processing():
            self.tracker.complete_processing(cancelled=True)
        self._set_idle()

    @staticmethod
    def _log_task_exit(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Enrichment task crashed", exc_info=exc)

    # === Execution ===

    async def _execute(self, ctx: _RunContext) -> EnrichmentReport:
        queue: asyncio.Queue[PendingRow] = asyncio.Queue()
        for row in ctx.rows:
            queue.put_nowait(row)

        with structlog.contextvars.bound_contextvars(run_id=ctx.run_id):
            try:
                workers = [
                    asyncio.create_task(self._worker(ctx, queue))
                    for _ in range(min(self.workers, len(ctx.rows)))
                ]
                await asyncio.gather(*workers)
            except asyncio.CancelledError:
                ctx.cancel_event.set()
                raise
            finally:
                report = ctx.report
                report.cancelled = ctx.cancel_event.is_set() and report.processed < report.total
                self.tracker.complete_processing(cancelled=report.cancelled)
                self._set_idle()
                enrichment_runs_total.labels(
                    outcome="cancelled" if report.cancelled else "completed"
                ).inc()
                logger.info(
                    "Enrichment run finished",
                    total=report.total,
                    processed=report.processed,
                    enriched=report.enriched,
                    skipped=report.skipped,
                    failed=report.failed,
                    cancelled=report.cancelled,
                )
        return ctx.report

    async def _worker(self, ctx: _RunContext, queue: "asyncio.Queue[PendingRow]") -> None:
        while not ctx.cancel_event.is_set():
            try:
                row = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._process_row(ctx, row)
            queue.task_done()
            if self.row_delay > 0 and not queue.empty():
                await asyncio.sleep(self.row_delay)

    async def _process_row(self, ctx: _RunContext, row: PendingRow) -> None:
        outcome_label = "failed"
        try:
            outcome = await self.classifier.classify_comment(row.comment, row.language)
            update = self.build_update(outcome)
            if update is None:
                outcome_label = "skipped"
                logger.warning("Model unavailable, row left pending", response_id=row.id)
            else:
                self.repository.update_enrichment(row.id, update)
                outcome_label = "enriched"
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Row enrichment failed",
                response_id=row.id,
                error=str(e),
                error_type=type(e).__name__,
            )

        report = ctx.report
        if outcome_label == "enriched":
            report.enriched += 1
        elif outcome_label == "skipped":
            report.skipped += 1
        else:
            report.failed += 1
        report.processed += 1
        enrichment_rows_total.labels(outcome=outcome_label).inc()
        self.tracker.increment_processed()

    def build_update(self, outcome: CommentOutcome) -> Optional[EnrichmentUpdate]:
        """
        Map a classification onto the fields to store.

        - Structured sentiment is stored with the fixed model confidence;
          a keyword fallback keeps its own lower confidence.
        - No model answer for sentiment: nothing is written (row stays pending).
        - No model answer for topics: sentiment is written, topics untouched.
        """
        sentiment = outcome.sentiment
        if isinstance(sentiment, Fallback) and sentiment.reason in _NO_ANSWER:
            return None

        if isinstance(sentiment, Structured):
            confidence = self.model_confidence
        else:
            confidence = sentiment.value.confidence

        topics = outcome.topics
        if isinstance(topics, Fallback) and topics.reason in _NO_ANSWER:
            topic_scores = None
        else:
            topic_scores = list(topics.value.topics)

        return EnrichmentUpdate(
            sentiment=sentiment.value.sentiment.value,
            sentiment_confidence=confidence,
            topics=topic_scores,
        )

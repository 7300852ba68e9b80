"""Background batch jobs: submission, progress polling, cancellation and results."""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from payee_api.exceptions import BatchJobNotFoundError, BatchNotReadyError, InvalidPayeeColumnError
from payee_core.classification.models import BatchProcessingResult
from payee_core.classification.progress import BatchStatus
from payee_core.config import get_config
from payee_core.pipeline import BatchClassificationPipeline
from payee_core.utils.values import coerce_payee_name

logger = logging.getLogger(__name__)


def extract_payee_names(rows: Sequence[Mapping[str, Any]], column: str) -> List[str]:
    """
    Pull the payee name of every row, keeping row order.

    Rows missing the column, or holding an empty value, yield "".

    Raises:
        InvalidPayeeColumnError: If no row has the column at all
    """
    if rows and not any(column in row for row in rows):
        raise InvalidPayeeColumnError(f"Column '{column}' not found in uploaded rows")
    return [coerce_payee_name(row.get(column)) for row in rows]


@dataclass
class BatchJob:
    """A submitted batch and its runtime state."""

    batch_id: str
    status: BatchStatus
    cancel_event: threading.Event = field(default_factory=threading.Event)
    result: Optional[BatchProcessingResult] = None
    thread: Optional[threading.Thread] = None


class BatchJobService:
    """
    Runs batches on background threads and keeps them for later polling.

    At most ``max_jobs`` batches are kept; the oldest finished ones are
    dropped first and running batches are never dropped.
    """

    def __init__(self, pipeline: BatchClassificationPipeline, max_jobs: Optional[int] = None):
        self.pipeline = pipeline
        if max_jobs is None:
            max_jobs = get_config().classification.max_retained_batches
        self.max_jobs = max(1, max_jobs)
        self._jobs: Dict[str, BatchJob] = {}
        self._lock = threading.Lock()

    def submit(
        self,
        names: Sequence[Any],
        original_rows: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> BatchJob:
        """
        Start a batch in the background.

        Args:
            names: Payee names in row order
            original_rows: Rows to pass through to export

        Returns:
            The new BatchJob
        """
        batch_id = str(uuid.uuid4())
        job = BatchJob(batch_id=batch_id, status=BatchStatus(batch_id, total=len(names)))
        job.thread = threading.Thread(
            target=self._run,
            args=(job, list(names), list(original_rows) if original_rows is not None else None),
            name=f"batch-{batch_id[:8]}",
            daemon=True,
        )
        with self._lock:
            self._jobs[batch_id] = job
            self._evict_finished()
        job.thread.start()
        logger.info(f"Submitted batch {batch_id} with {len(names)} names")
        return job

    def _run(
        self,
        job: BatchJob,
        names: List[Any],
        original_rows: Optional[List[Mapping[str, Any]]],
    ) -> None:
        try:
            job.result = self.pipeline.process_batch(
                names,
                original_rows=original_rows,
                batch_id=job.batch_id,
                status=job.status,
                cancel_event=job.cancel_event,
            )
        except Exception as e:
            logger.error(f"Batch {job.batch_id} failed: {e}", exc_info=True)
            job.status.fail(str(e))

    def _evict_finished(self) -> None:
        # Caller holds the lock; dict order is submission order
        excess = len(self._jobs) - self.max_jobs
        if excess <= 0:
            return
        finished = [
            batch_id for batch_id, job in self._jobs.items() if job.status.is_finished
        ][:excess]
        for batch_id in finished:
            del self._jobs[batch_id]
        if finished:
            logger.info(f"Dropped {len(finished)} finished batches from memory")

    def get_job(self, batch_id: str) -> BatchJob:
        with self._lock:
            job = self._jobs.get(batch_id)
        if job is None:
            raise BatchJobNotFoundError(f"Batch {batch_id} not found")
        return job

    def get_status(self, batch_id: str) -> dict:
        return self.get_job(batch_id).status.snapshot()

    def cancel(self, batch_id: str) -> dict:
        """Request cooperative cancellation; rows already started still finish."""
        job = self.get_job(batch_id)
        if not job.status.is_finished:
            job.cancel_event.set()
            logger.info(f"Cancellation requested for batch {batch_id}")
        return job.status.snapshot()

    def get_result(self, batch_id: str) -> BatchProcessingResult:
        """
        Results of a finished batch.

        Raises:
            BatchJobNotFoundError: Unknown batch
            BatchNotReadyError: Batch still running or failed without results
        """
        job = self.get_job(batch_id)
        if job.result is None:
            snapshot = job.status.snapshot()
            raise BatchNotReadyError(
                f"Batch {batch_id} has no results (state: {snapshot['state']})"
            )
        return job.result

    def wait(self, batch_id: str, timeout: Optional[float] = None) -> dict:
        """Block until the batch thread ends; returns the final status."""
        job = self.get_job(batch_id)
        if job.thread is not None:
            job.thread.join(timeout)
        return job.status.snapshot()

"""
Bounded pool of upload workers draining a shared WorkQueue.

Each worker loops: take the next unit, skip directories, resolve the
content type, read the file, put it (unless dry-run) and emit a
ProgressEvent. ``run`` returns only after every worker has seen an empty
queue and exited.

Two failure policies exist and are chosen by the job kind:

- PERMISSIVE (folder copy, full bucket sync): a failed unit is logged,
  counted and reported on its event; the worker moves on.
- FATAL (single file): the first failure stops all workers and ``run``
  raises UploadAbortedError.
"""

import contextvars
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from s3publish.errors import UploadAbortedError
from s3publish.storage.bucket import BucketHandle
from s3publish.transfer.content_type import ContentTypeResolver
from s3publish.transfer.work_queue import QueuedUnit, WorkQueue
from s3publish.utils.config import TransferConfig
from s3publish.utils.logging import get_logger
from s3publish.utils.metrics import get_metrics

# Module logger
logger = get_logger(__name__)

# Module metrics
metrics = get_metrics()


class UnitOutcome(str, Enum):
    """What happened to one transfer unit."""

    UPLOADED = "uploaded"
    DRY_RUN = "dry_run"
    SKIPPED_DIRECTORY = "skipped_directory"
    FAILED = "failed"


class FailurePolicy(str, Enum):
    """How a failed put affects the rest of the pool."""

    PERMISSIVE = "permissive"
    FATAL = "fatal"


@dataclass(frozen=True)
class ProgressEvent:
    """
    Progress report for one dequeued unit. Observability only.

    Attributes:
        ordinal: Dequeue ordinal (1-based)
        total: Number of units in the manifest
        remote_key: Key of the unit
        outcome: UnitOutcome for the unit
        content_type: Resolved content type (None for directories)
        size_bytes: Payload size read from disk
        error: Error message when outcome is FAILED
    """

    ordinal: int
    total: int
    remote_key: str
    outcome: UnitOutcome
    content_type: Optional[str] = None
    size_bytes: int = 0
    error: Optional[str] = None


ProgressCallback = Callable[[ProgressEvent], None]


class WorkerPool:
    """
    N worker threads sharing one WorkQueue.

    Example:
        >>> pool = WorkerPool(bucket, config)
        >>> events = pool.run(WorkQueue(units))
        >>> failed = [e for e in events if e.outcome == UnitOutcome.FAILED]
    """

    def __init__(
        self,
        bucket: BucketHandle,
        config: TransferConfig,
        resolver: Optional[ContentTypeResolver] = None,
        failure_policy: FailurePolicy = FailurePolicy.PERMISSIVE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self._bucket = bucket
        self._config = config
        self._resolver = resolver or ContentTypeResolver()
        self._failure_policy = failure_policy
        self._on_progress = on_progress

        self._lock = threading.Lock()
        self._events: List[ProgressEvent] = []
        self._abort = threading.Event()
        self._fatal_error: Optional[UploadAbortedError] = None
        self._worker_error: Optional[Exception] = None

    @property
    def worker_count(self) -> int:
        return self._config.concurrency

    def run(self, queue: WorkQueue) -> List[ProgressEvent]:
        """
        Drain ``queue`` with ``concurrency`` workers and wait for all of them.

        Returns:
            ProgressEvents ordered by ordinal

        Raises:
            UploadAbortedError: Under the FATAL policy, if any put failed
            Exception: Whatever stopped a worker outside per-unit handling
        """
        self._progress(f"Total files: {queue.total}")
        self._progress(f"Thread Count: {self.worker_count}")
        metrics.set_queue_depth(len(queue))

        threads = []
        for index in range(self.worker_count):
            # One context copy per thread; a Context cannot be entered twice at once
            context = contextvars.copy_context()
            thread = threading.Thread(
                target=context.run,
                args=(self._work, queue),
                name=f"upload-worker-{index + 1}",
                daemon=True,
            )
            threads.append(thread)

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if self._fatal_error is not None:
            raise self._fatal_error
        if self._worker_error is not None:
            raise self._worker_error

        return sorted(self._events, key=lambda event: event.ordinal)

    def _work(self, queue: WorkQueue) -> None:
        metrics.worker_started()
        try:
            while not self._abort.is_set():
                item = queue.take()
                if item is None:
                    return
                metrics.set_queue_depth(len(queue))
                event = self._process(item, queue.total)
                self._emit(event)
        except Exception as exc:
            logger.error(f"Upload worker stopped unexpectedly: {exc}", exc_info=True)
            with self._lock:
                if self._worker_error is None:
                    self._worker_error = exc
            self._abort.set()
        finally:
            metrics.worker_stopped()

    def _process(self, item: QueuedUnit, total: int) -> ProgressEvent:
        unit = item.unit
        position = f"[{item.ordinal}/{total}]"

        if unit.is_directory:
            self._progress(f"{position} {unit.remote_key} is a directory")
            return ProgressEvent(
                ordinal=item.ordinal,
                total=total,
                remote_key=unit.remote_key,
                outcome=UnitOutcome.SKIPPED_DIRECTORY,
            )

        content_type = None
        size = 0
        try:
            content_type = self._resolver.resolve(unit.local_path)
            self._progress(f"{position} uploading {unit.remote_key} {content_type}")

            payload = unit.local_path.read_bytes()
            size = len(payload)

            if self._config.dry_run:
                metrics.record_dry_run()
                outcome = UnitOutcome.DRY_RUN
            else:
                with metrics.track_upload():
                    self._bucket.put(unit.remote_key, payload, content_type, self._config.acl)
                metrics.record_upload_success(bytes_uploaded=size)
                outcome = UnitOutcome.UPLOADED

        except Exception as exc:
            return self._fail(item, total, content_type, size, exc)

        return ProgressEvent(
            ordinal=item.ordinal,
            total=total,
            remote_key=unit.remote_key,
            outcome=outcome,
            content_type=content_type,
            size_bytes=size,
        )

    def _fail(
        self,
        item: QueuedUnit,
        total: int,
        content_type: Optional[str],
        size: int,
        exc: Exception,
    ) -> ProgressEvent:
        key = item.unit.remote_key
        error_msg = f"Upload of {key} failed: {exc}"
        metrics.record_upload_failure()

        if self._failure_policy is FailurePolicy.FATAL:
            logger.error(error_msg, exc_info=True)
            with self._lock:
                if self._fatal_error is None:
                    self._fatal_error = UploadAbortedError(error_msg, remote_key=key)
                    self._fatal_error.__cause__ = exc
            self._abort.set()
        else:
            logger.error(
                f"[{item.ordinal}/{total}] {error_msg}; continuing",
                exc_info=True,
                extra={"remote_key": key, "ordinal": item.ordinal},
            )

        return ProgressEvent(
            ordinal=item.ordinal,
            total=total,
            remote_key=key,
            outcome=UnitOutcome.FAILED,
            content_type=content_type,
            size_bytes=size,
            error=str(exc),
        )

    def _emit(self, event: ProgressEvent) -> None:
        with self._lock:
            self._events.append(event)
        if self._on_progress is None:
            return
        try:
            self._on_progress(event)
        except Exception:
            logger.error(
                f"Progress callback failed for {event.remote_key}; continuing", exc_info=True
            )

    def _progress(self, message: str) -> None:
        if self._config.verbose:
            logger.info(message)
        else:
            logger.debug(message)

"""
Transfer jobs: one abstraction for single-file, folder-copy and
full-bucket-sync publishes.

A TransferJob is created from a TransferConfig, a bucket handle and a local
source, run once, and discarded. Its lifecycle is::

    CREATED -> VALIDATED -> MANIFEST_BUILT -> [PRECLEANING] -> UPLOADING -> COMPLETED

PRECLEANING only happens for a full bucket sync with ``clean`` enabled.
Bulk jobs reach COMPLETED even when some units failed; those failures are
visible on ``JobResult.failed``. A single-file job whose put fails ends in
ABORTED and raises UploadAbortedError. Any other fatal error (bad
configuration, unreadable source, failed bucket wipe) also leaves the job
ABORTED and propagates.

Example usage:
    >>> config = TransferConfig(
    ...     bucket="static-site-prod",
    ...     region="us-east-1",
    ...     access_key="AKIA...",
    ...     access_secret="...",
    ...     job_kind=JobKind.FOLDER_COPY,
    ... )
    >>> result = run_job(config, "./dist", remote_prefix="builds/v1")
    >>> print(result.public_url)
    https://static-site-prod.s3.us-east-1.amazonaws.com/builds/v1
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from s3publish.errors import ConfigError, S3PublishError
from s3publish.storage.bucket import BucketHandle, S3BucketHandle
from s3publish.transfer.content_type import ContentTypeResolver
from s3publish.transfer.manifest import (
    TransferUnit,
    build_file_manifest,
    build_manifest,
    normalize_key,
)
from s3publish.transfer.precleaner import preclean, should_preclean
from s3publish.transfer.work_queue import WorkQueue
from s3publish.transfer.worker_pool import (
    FailurePolicy,
    ProgressCallback,
    ProgressEvent,
    UnitOutcome,
    WorkerPool,
)
from s3publish.utils.config import JobKind, TransferConfig
from s3publish.utils.logging import (
    get_logger,
    log_function_call,
    reset_correlation_id,
    set_correlation_id,
)
from s3publish.utils.metrics import get_metrics

# Module logger
logger = get_logger(__name__)

# Module metrics
metrics = get_metrics()


class JobState(str, Enum):
    """Lifecycle states of a TransferJob."""

    CREATED = "created"
    VALIDATED = "validated"
    MANIFEST_BUILT = "manifest_built"
    PRECLEANING = "precleaning"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class JobResult:
    """
    Outcome of a completed TransferJob.

    Attributes:
        job_id: Correlation id the job logged under
        job_kind: Kind of job that ran
        state: Terminal state (always COMPLETED for a returned result)
        public_url: The one public URL derived for this job
        events: ProgressEvents ordered by ordinal
    """

    job_id: str
    job_kind: JobKind
    state: JobState
    public_url: str
    events: Tuple[ProgressEvent, ...] = ()

    @property
    def total(self) -> int:
        return len(self.events)

    @property
    def uploaded(self) -> List[ProgressEvent]:
        return [e for e in self.events if e.outcome is UnitOutcome.UPLOADED]

    @property
    def failed(self) -> List[ProgressEvent]:
        return [e for e in self.events if e.outcome is UnitOutcome.FAILED]


def failure_policy_for(job_kind: JobKind) -> FailurePolicy:
    """Single-file publishes abort on failure; bulk publishes carry on."""
    if job_kind is JobKind.SINGLE_FILE:
        return FailurePolicy.FATAL
    return FailurePolicy.PERMISSIVE


def aggregate_public_url(
    job_kind: JobKind,
    bucket: BucketHandle,
    remote_prefix: str,
    units: List[TransferUnit],
) -> str:
    """
    Derive the single public URL a job reports.

    - SINGLE_FILE: the uploaded object's URL
    - FOLDER_COPY: the URL of the remote prefix
    - FULL_BUCKET_SYNC: the bucket's base URL
    """
    if job_kind is JobKind.SINGLE_FILE:
        return bucket.public_url(units[0].remote_key)
    if job_kind is JobKind.FOLDER_COPY:
        return bucket.public_url(normalize_key(remote_prefix))
    return bucket.base_url()


class TransferJob:
    """
    One run of a publish against a borrowed bucket handle.

    Attributes:
        config: Immutable job configuration
        source: Local file (SINGLE_FILE) or directory (other kinds)
        remote_prefix: Key prefix for uploaded objects; ignored by a full
            bucket sync, which mirrors the folder at the bucket root
    """

    def __init__(
        self,
        config: TransferConfig,
        bucket: BucketHandle,
        source: Union[str, Path, None],
        remote_prefix: str = "",
        resolver: Optional[ContentTypeResolver] = None,
        on_progress: Optional[ProgressCallback] = None,
        job_id: Optional[str] = None,
    ) -> None:
        self.config = config
        self.bucket = bucket
        self.source = source
        self.remote_prefix = remote_prefix or ""
        self.job_id = job_id or f"job-{uuid.uuid4().hex[:12]}"
        self._resolver = resolver or ContentTypeResolver()
        self._on_progress = on_progress
        self._state = JobState.CREATED
        self._units: List[TransferUnit] = []

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def units(self) -> List[TransferUnit]:
        """The manifest, empty until the job has built it."""
        return list(self._units)

    def run(self) -> JobResult:
        """
        Run the job to completion.

        Returns:
            JobResult in state COMPLETED

        Raises:
            ConfigError: Missing or invalid parameters
            FilesystemError: Unreadable source
            PrecleanError: Bucket wipe failed; nothing was uploaded
            UploadAbortedError: Single-file put failed
        """
        if self._state is not JobState.CREATED:
            raise S3PublishError(f"Job {self.job_id} has already run ({self._state.value})")

        token = set_correlation_id(self.job_id)
        try:
            return self._run()
        finally:
            reset_correlation_id(token)

    def _run(self) -> JobResult:
        kind = self.config.job_kind

        try:
            self._validate()
            self._build_manifest()

            if should_preclean(self.config):
                self._state = JobState.PRECLEANING
                preclean(self.bucket, self.config)

            self._state = JobState.UPLOADING
            pool = WorkerPool(
                bucket=self.bucket,
                config=self.config,
                resolver=self._resolver,
                failure_policy=failure_policy_for(kind),
                on_progress=self._on_progress,
            )
            events = pool.run(WorkQueue(self._units))

        except Exception:
            self._state = JobState.ABORTED
            metrics.record_job(kind=getattr(kind, "value", str(kind)), state=self._state.value)
            raise

        self._state = JobState.COMPLETED
        metrics.record_job(kind=kind.value, state=self._state.value)

        public_url = aggregate_public_url(kind, self.bucket, self.remote_prefix, self._units)
        result = JobResult(
            job_id=self.job_id,
            job_kind=kind,
            state=self._state,
            public_url=public_url,
            events=tuple(events),
        )
        self._report(result)
        return result

    def _validate(self) -> None:
        self.config.validate()

        if self.source is None or str(self.source) == "":
            raise ConfigError("Missing path to local source")

        if self.config.job_kind is JobKind.FOLDER_COPY and not normalize_key(self.remote_prefix):
            raise ConfigError("Missing remote path")

        if self.config.job_kind is JobKind.FULL_BUCKET_SYNC and normalize_key(self.remote_prefix):
            logger.warning(
                f"Remote prefix {self.remote_prefix!r} ignored: a full bucket sync "
                "mirrors the folder at the bucket root"
            )

        logger.info(f"Summary for {self.config.job_kind.value} ({self.job_id}): {self.config.summary()}")
        self._state = JobState.VALIDATED

    def _build_manifest(self) -> None:
        kind = self.config.job_kind
        if kind is JobKind.SINGLE_FILE:
            self._units = build_file_manifest(self.source, self.remote_prefix)
        elif kind is JobKind.FOLDER_COPY:
            self._units = build_manifest(self.source, self.remote_prefix)
        else:
            self._units = build_manifest(self.source, "")
        self._state = JobState.MANIFEST_BUILT

    def _report(self, result: JobResult) -> None:
        failed = result.failed
        if self.config.dry_run:
            logger.info(f"Dry run complete: {result.total} entries rehearsed, nothing uploaded")
        elif self.config.job_kind is JobKind.SINGLE_FILE:
            logger.info(f"Uploaded {Path(str(self.source)).name} to {result.public_url}")
        elif self.config.job_kind is JobKind.FULL_BUCKET_SYNC:
            logger.info(f"Synced {self.source} to S3 {self.config.bucket}")
        else:
            logger.info(f"Uploaded {self.source} to S3 {self.config.bucket}")

        if failed:
            logger.warning(f"{len(failed)} of {result.total} entries failed to upload")

        logger.info(f"Public URL: {result.public_url}")


@log_function_call
def run_job(
    config: TransferConfig,
    source: Union[str, Path],
    remote_prefix: str = "",
    bucket: Optional[BucketHandle] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> JobResult:
    """
    Build and run a TransferJob, creating an S3 bucket handle if none is given.

    Args:
        config: Job configuration (job kind included)
        source: Local file or directory to publish
        remote_prefix: Key prefix for uploaded objects
        bucket: Bucket handle to borrow; built from config when None
        on_progress: Optional callback receiving each ProgressEvent

    Returns:
        JobResult of the completed job
    """
    config.validate()
    handle = bucket if bucket is not None else S3BucketHandle.from_config(config)
    job = TransferJob(
        config=config,
        bucket=handle,
        source=source,
        remote_prefix=remote_prefix,
        on_progress=on_progress,
    )
    return job.run()

"""
Bulk transfer engine.

Builds a manifest of transfer units from a local tree, optionally clears
the bucket, fans the units out across a bounded pool of upload workers and
derives the public URL of the result.
"""

from .content_type import ContentTypeResolver, resolve_content_type
from .manifest import TransferUnit, build_file_manifest, build_manifest, normalize_key
from .work_queue import QueuedUnit, WorkQueue
from .worker_pool import FailurePolicy, ProgressEvent, UnitOutcome, WorkerPool
from .precleaner import preclean
from .job import JobResult, JobState, TransferJob, aggregate_public_url, run_job

__all__ = [
    "ContentTypeResolver",
    "resolve_content_type",
    "TransferUnit",
    "build_file_manifest",
    "build_manifest",
    "normalize_key",
    "QueuedUnit",
    "WorkQueue",
    "FailurePolicy",
    "ProgressEvent",
    "UnitOutcome",
    "WorkerPool",
    "preclean",
    "JobResult",
    "JobState",
    "TransferJob",
    "aggregate_public_url",
    "run_job",
]

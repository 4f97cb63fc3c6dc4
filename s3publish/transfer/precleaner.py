"""
Full-bucket wipe performed before a full bucket sync.

The wipe is bucket-scoped: every object in the bucket is deleted, whatever
its key prefix. It runs only for FULL_BUCKET_SYNC jobs with ``clean``
enabled, strictly before the first upload. In dry-run mode it only reports
what it would do.
"""

from s3publish.errors import PrecleanError
from s3publish.storage.bucket import BucketHandle
from s3publish.utils.config import JobKind, TransferConfig
from s3publish.utils.logging import get_logger
from s3publish.utils.metrics import get_metrics

# Module logger
logger = get_logger(__name__)

# Module metrics
metrics = get_metrics()


def should_preclean(config: TransferConfig) -> bool:
    """True when the job kind and flags call for a bucket wipe."""
    return config.job_kind is JobKind.FULL_BUCKET_SYNC and config.clean


def preclean(bucket: BucketHandle, config: TransferConfig) -> bool:
    """
    Clear the whole bucket if the configuration asks for it.

    Args:
        bucket: Bucket to clear
        config: Job configuration

    Returns:
        True if objects were actually deleted, False if skipped or dry-run

    Raises:
        PrecleanError: If the bucket could not be cleared; uploads must not start
    """
    if not should_preclean(config):
        return False

    if config.dry_run:
        logger.info(f"Dry run: would clear bucket {config.bucket}")
        return False

    logger.info(f"Removing files on {config.bucket}...")
    try:
        deleted = bucket.delete_all()
    except Exception as exc:
        raise PrecleanError(f"Failed to clear bucket {config.bucket}: {exc}") from exc

    metrics.record_bucket_clear()
    logger.info(f"{config.bucket} cleared ({deleted} objects removed).")
    return True

"""
Lookup of a published object by key prefix and file name.
"""

from typing import Optional

from s3publish.errors import ObjectNotFoundError
from s3publish.storage.bucket import BucketHandle
from s3publish.utils.logging import get_logger, log_function_call

# Module logger
logger = get_logger(__name__)


@log_function_call
def find_object(
    bucket: BucketHandle,
    prefix: str,
    filename: str,
    fail: bool = False,
) -> Optional[str]:
    """
    Return the public URL of the first key under ``prefix`` containing ``filename``.

    Args:
        bucket: Bucket to search
        prefix: Key prefix (folder path) to search in
        filename: Substring the key must contain
        fail: Raise instead of returning None when nothing matches

    Returns:
        Public URL of the first match in listing order, or None

    Raises:
        ObjectNotFoundError: If nothing matches and ``fail`` is set
    """
    matches = [key for key in bucket.list_keys(prefix) if filename in key]

    if not matches:
        if fail:
            raise ObjectNotFoundError(f"No files were found with filename: {filename}")
        logger.info(f"No object under {prefix!r} matches {filename!r}")
        return None

    if len(matches) > 1:
        logger.warning(
            f"More than one object matches {filename!r} under {prefix!r}; "
            f"returning the first ({matches[0]}), which may not be the one you want"
        )

    return bucket.public_url(matches[0])

"""
Exception hierarchy for s3publish.

Fatal conditions (bad configuration, unreadable source tree, failed bucket
wipe, failed single-file upload) are raised as one of these types. Per-unit
failures of bulk jobs are not raised; they are reported on the unit's
ProgressEvent instead.
"""


class S3PublishError(Exception):
    """Base class for all s3publish errors."""


class ConfigError(S3PublishError, ValueError):
    """A required parameter is missing or invalid."""


class FilesystemError(S3PublishError):
    """The local source path cannot be read."""


class StorageError(S3PublishError):
    """The object store rejected or failed a request."""


class PrecleanError(StorageError):
    """The bucket could not be cleared before a full sync."""


class UploadAbortedError(S3PublishError):
    """A single-file upload failed and the job was aborted."""

    def __init__(self, message: str, remote_key: str) -> None:
        super().__init__(message)
        self.remote_key = remote_key


class ObjectNotFoundError(S3PublishError):
    """No object matched a lookup that was required to succeed."""

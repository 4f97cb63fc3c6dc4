"""
Bucket handle abstraction and its S3 implementation.

The transfer engine only talks to a bucket through the BucketHandle
contract: ``put``, ``delete_all``, ``public_url``, ``base_url`` and
``list_keys``. Signing, TLS, timeouts and transport retries all live behind
this seam.

Example usage:
    >>> bucket = S3BucketHandle(
    ...     bucket_name="static-site-prod",
    ...     region="us-east-1",
    ...     access_key="AKIA...",
    ...     access_secret="...",
    ... )
    >>> bucket.put("v1/index.html", b"<html></html>", "text/html", "public-read")
    >>> bucket.public_url("v1/index.html")
    'https://static-site-prod.s3.us-east-1.amazonaws.com/v1/index.html'
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from s3publish.errors import StorageError
from s3publish.utils.config import TransferConfig
from s3publish.utils.logging import get_logger
from s3publish.utils.metrics import get_metrics
from s3publish.utils.retry import retry_with_backoff

# Module logger
logger = get_logger(__name__)

# Module metrics
metrics = get_metrics()

# Configuration constants
MAX_RETRIES = 3
DELETE_BATCH_SIZE = 1000  # S3 DeleteObjects limit per request
TRANSIENT_ERRORS = (EndpointConnectionError, ConnectionClosedError, ReadTimeoutError)


class BucketHandle(ABC):
    """Remote bucket borrowed by a transfer job for the job's duration."""

    @abstractmethod
    def put(self, key: str, payload: bytes, content_type: str, acl: str) -> None:
        """Store ``payload`` under ``key``. Raises StorageError on failure."""

    @abstractmethod
    def delete_all(self) -> int:
        """Delete every object in the bucket and return how many were deleted."""

    @abstractmethod
    def list_keys(self, prefix: str = "") -> List[str]:
        """Return the keys under ``prefix`` in listing order."""

    @abstractmethod
    def base_url(self) -> str:
        """Public URL of the bucket root, without a trailing slash."""

    def public_url(self, key: str) -> str:
        """Public URL of the object (or key prefix) ``key``."""
        return f"{self.base_url()}/{quote(key, safe='/~')}"


class S3BucketHandle(BucketHandle):
    """
    BucketHandle backed by a boto3 S3 client.

    Attributes:
        bucket_name: S3 bucket name
        region: Bucket region, used for the client and for public URLs
    """

    def __init__(
        self,
        bucket_name: str,
        region: str,
        access_key: Optional[str] = None,
        access_secret: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.region = region
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=access_secret,
            config=Config(
                signature_version="s3v4",
                connect_timeout=10,
                read_timeout=60,
                retries={"max_attempts": 0},
            ),
        )

    @classmethod
    def from_config(cls, config: TransferConfig) -> "S3BucketHandle":
        """Build a handle from a validated TransferConfig."""
        return cls(
            bucket_name=config.bucket,
            region=config.region,
            access_key=config.access_key,
            access_secret=config.access_secret,
        )

    def __repr__(self) -> str:
        return f"S3BucketHandle(bucket_name={self.bucket_name!r}, region={self.region!r})"

    def put(self, key: str, payload: bytes, content_type: str, acl: str) -> None:
        try:
            self._put_object(key, payload, content_type, acl)
        except (BotoCoreError, ClientError) as exc:
            metrics.record_storage_error(operation="put", error_type=type(exc).__name__)
            raise StorageError(f"Failed to put s3://{self.bucket_name}/{key}: {exc}") from exc

    @retry_with_backoff(
        max_attempts=MAX_RETRIES,
        base_delay=1.0,
        max_delay=15.0,
        exceptions=TRANSIENT_ERRORS,
    )
    def _put_object(self, key: str, payload: bytes, content_type: str, acl: str) -> None:
        self._client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=payload,
            ContentType=content_type,
            ACL=acl,
        )

    def delete_all(self) -> int:
        """
        Delete every object in the bucket, regardless of key prefix.

        Keys are listed page by page and removed with batched DeleteObjects
        requests.

        Returns:
            Number of objects deleted

        Raises:
            StorageError: If listing fails or S3 reports any per-key error
        """
        deleted = 0
        batch: List[dict] = []
        try:
            for key in self._iter_keys(prefix=""):
                batch.append({"Key": key})
                if len(batch) == DELETE_BATCH_SIZE:
                    deleted += self._delete_batch(batch)
                    batch = []
            if batch:
                deleted += self._delete_batch(batch)
        except (BotoCoreError, ClientError) as exc:
            metrics.record_storage_error(
                operation="delete_all", error_type=type(exc).__name__
            )
            raise StorageError(f"Failed to clear bucket {self.bucket_name}: {exc}") from exc

        logger.debug(f"Deleted {deleted} objects from {self.bucket_name}")
        return deleted

    def _delete_batch(self, batch: List[dict]) -> int:
        response = self._client.delete_objects(
            Bucket=self.bucket_name,
            Delete={"Objects": batch, "Quiet": True},
        )
        errors = response.get("Errors", [])
        if errors:
            first = errors[0]
            metrics.record_storage_error(
                operation="delete_all", error_type=first.get("Code", "Unknown")
            )
            raise StorageError(
                f"Failed to delete {len(errors)} object(s) from {self.bucket_name}, "
                f"first: {first.get('Key')} ({first.get('Code')}: {first.get('Message')})"
            )
        return len(batch)

    def list_keys(self, prefix: str = "") -> List[str]:
        try:
            return list(self._iter_keys(prefix=prefix))
        except (BotoCoreError, ClientError) as exc:
            metrics.record_storage_error(operation="list", error_type=type(exc).__name__)
            raise StorageError(
                f"Failed to list s3://{self.bucket_name}/{prefix}: {exc}"
            ) from exc

    def _iter_keys(self, prefix: str):
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
            for obj in page.get("Contents", []):
                yield obj["Key"]

    def base_url(self) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com"

"""
Object storage access.

Provides the BucketHandle contract the transfer engine depends on, its
boto3-backed S3 implementation, and object lookup by prefix and name.
"""

from .bucket import BucketHandle, S3BucketHandle
from .finder import find_object

__all__ = [
    "BucketHandle",
    "S3BucketHandle",
    "find_object",
]

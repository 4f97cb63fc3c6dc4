"""Shared fixtures for transfer engine tests."""

import threading
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest

from s3publish.storage.bucket import BucketHandle
from s3publish.errors import StorageError
from s3publish.utils.config import JobKind, TransferConfig


class RecordingBucket(BucketHandle):
    """In-memory BucketHandle that records every call in order."""

    def __init__(
        self,
        name: str = "test-bucket",
        fail_keys: Optional[Set[str]] = None,
        fail_delete: bool = False,
        keys: Optional[List[str]] = None,
    ) -> None:
        self.name = name
        self.fail_keys = fail_keys or set()
        self.fail_delete = fail_delete
        self.objects: Dict[str, Tuple[bytes, str, str]] = {}
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.listing = list(keys or [])
        self._lock = threading.Lock()

    def put(self, key: str, payload: bytes, content_type: str, acl: str) -> None:
        with self._lock:
            self.calls.append(("put", key))
        if key in self.fail_keys:
            raise StorageError(f"simulated failure for {key}")
        with self._lock:
            self.objects[key] = (payload, content_type, acl)

    def delete_all(self) -> int:
        with self._lock:
            self.calls.append(("delete_all", None))
        if self.fail_delete:
            raise StorageError("simulated delete failure")
        count = len(self.objects)
        self.objects.clear()
        return count

    def list_keys(self, prefix: str = "") -> List[str]:
        return [key for key in self.listing if key.startswith(prefix)]

    def base_url(self) -> str:
        return f"https://{self.name}.s3.us-east-1.amazonaws.com"

    @property
    def put_keys(self) -> List[str]:
        return [key for call, key in self.calls if call == "put"]

    def count(self, call_name: str) -> int:
        return sum(1 for call, _ in self.calls if call == call_name)


@pytest.fixture
def bucket() -> RecordingBucket:
    return RecordingBucket()


@pytest.fixture
def make_bucket():
    """Factory for RecordingBuckets with failure injection."""
    return RecordingBucket


@pytest.fixture
def make_config():
    """Factory for valid TransferConfigs with per-test overrides."""

    def _make(**overrides) -> TransferConfig:
        values = dict(
            bucket="test-bucket",
            region="us-east-1",
            access_key="AKIATEST",
            access_secret="secret",
            job_kind=JobKind.FOLDER_COPY,
            concurrency=2,
        )
        values.update(overrides)
        return TransferConfig(**values)

    return _make


@pytest.fixture
def site_tree(tmp_path: Path) -> Path:
    """Local tree {a.txt, sub/b.css}."""
    root = tmp_path / "site"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("alpha")
    (root / "sub" / "b.css").write_text("body { color: red; }")
    return root

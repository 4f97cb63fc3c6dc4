"""
Manifest building: local filesystem entries mapped to remote keys.

Every entry under the root becomes one TransferUnit, directories included
(flagged ``is_directory``) so progress totals count them. Units are ordered
lexically by their path relative to the root.

Example usage:
    >>> units = build_manifest("./dist", "builds/v1")
    >>> [(u.remote_key, u.is_directory) for u in units]
    [('builds/v1/assets', True), ('builds/v1/assets/app.js', False), ...]
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from s3publish.errors import FilesystemError
from s3publish.utils.logging import get_logger, log_function_call

# Module logger
logger = get_logger(__name__)

_SEPARATOR_RUNS = re.compile(r"/{2,}")


@dataclass(frozen=True)
class TransferUnit:
    """
    One filesystem entry mapped to a remote key.

    Attributes:
        local_path: Absolute local path of the entry
        remote_key: Object key in the bucket
        is_directory: Directory entries are counted but never uploaded
    """

    local_path: Path
    remote_key: str
    is_directory: bool = False


def normalize_key(key: str) -> str:
    """
    Collapse repeated separators and drop any leading separator.

    Example:
        >>> normalize_key("v1//sub///b.css")
        'v1/sub/b.css'
        >>> normalize_key("/a.txt")
        'a.txt'
    """
    return _SEPARATOR_RUNS.sub("/", key).lstrip("/")


def join_key(remote_prefix: str, relative_path: str) -> str:
    """Remote key for ``relative_path`` under ``remote_prefix``."""
    return normalize_key(f"{remote_prefix}/{relative_path}")


def _raise_filesystem_error(error: OSError) -> None:
    raise FilesystemError(f"Cannot read {error.filename}: {error.strerror}") from error


@log_function_call
def build_manifest(root: Union[str, Path], remote_prefix: str = "") -> List[TransferUnit]:
    """
    Recursively list every entry under ``root`` as a TransferUnit.

    Args:
        root: Local directory to publish
        remote_prefix: Key prefix prepended to each relative path

    Returns:
        Units ordered lexically by relative POSIX path

    Raises:
        FilesystemError: If root (or any directory below it) is unreadable
    """
    root_path = Path(root).expanduser().resolve()
    if not root_path.is_dir():
        raise FilesystemError(f"Not a readable directory: {root_path}")
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise FilesystemError(f"Permission denied: {root_path}")

    entries = []
    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_raise_filesystem_error):
        current = Path(dirpath)
        for name in dirnames:
            entries.append((current / name, True))
        for name in filenames:
            entries.append((current / name, False))

    units = []
    for path, is_directory in entries:
        relative = path.relative_to(root_path).as_posix()
        units.append(
            TransferUnit(
                local_path=path,
                remote_key=join_key(remote_prefix, relative),
                is_directory=is_directory,
            )
        )
    units.sort(key=lambda unit: unit.local_path.relative_to(root_path).as_posix())

    files = sum(1 for unit in units if not unit.is_directory)
    logger.info(
        f"Manifest built for {root_path}: {len(units)} entries "
        f"({files} files, {len(units) - files} directories)"
    )
    return units


@log_function_call
def build_file_manifest(path: Union[str, Path], remote_prefix: str = "") -> List[TransferUnit]:
    """
    Manifest for a single file: one unit keyed ``remote_prefix/<filename>``.

    Raises:
        FilesystemError: If path is not a readable regular file
    """
    file_path = Path(path).expanduser().resolve()
    if not file_path.is_file():
        raise FilesystemError(f"Not a readable file: {file_path}")
    if not os.access(file_path, os.R_OK):
        raise FilesystemError(f"Permission denied: {file_path}")

    return [TransferUnit(local_path=file_path, remote_key=join_key(remote_prefix, file_path.name))]

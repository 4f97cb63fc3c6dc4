"""
Thread-safe work queue handing transfer units to upload workers.

``take`` checks for emptiness and removes the next unit inside one critical
section, so concurrent workers never receive the same unit twice and no
unit is skipped. Each take is stamped with a strictly increasing ordinal
for progress display; ordinals follow dequeue order, not completion order.
"""

import threading
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Optional

from s3publish.transfer.manifest import TransferUnit


@dataclass(frozen=True)
class QueuedUnit:
    """A dequeued unit with its 1-based take ordinal."""

    ordinal: int
    unit: TransferUnit


class WorkQueue:
    """
    Mutex-guarded FIFO of TransferUnits.

    Example:
        >>> queue = WorkQueue(units)
        >>> item = queue.take()
        >>> while item is not None:
        ...     print(f"[{item.ordinal}/{queue.total}] {item.unit.remote_key}")
        ...     item = queue.take()
    """

    def __init__(self, units: Iterable[TransferUnit]) -> None:
        self._units = deque(units)
        self._total = len(self._units)
        self._taken = 0
        self._lock = threading.Lock()

    @property
    def total(self) -> int:
        """Number of units the queue was created with."""
        return self._total

    def __len__(self) -> int:
        with self._lock:
            return len(self._units)

    def take(self) -> Optional[QueuedUnit]:
        """Remove and return the next unit, or None once the queue is empty."""
        with self._lock:
            if not self._units:
                return None
            self._taken += 1
            return QueuedUnit(ordinal=self._taken, unit=self._units.popleft())

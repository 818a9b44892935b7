"""Fixed-capacity pool of reusable objects addressed by index."""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class PoolExhausted(Exception):
    """Raised when a pool has no free slot left."""


class BufferPool(Generic[T]):
    """Preallocated objects handed out by index and recycled on removal.

    Freed indices are reused most-recently-freed first; a fresh pool hands
    out indices in ascending order.
    """

    def __init__(self, capacity: int, factory: Callable[[], T]) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._items: List[T] = [factory() for _ in range(capacity)]
        self._occupied: List[bool] = [False] * capacity
        self._available: List[int] = list(range(capacity - 1, -1, -1))

    def allocate(self) -> int:
        """Reserve a free slot and return its index."""
        if not self._available:
            log.warning("No available space in buffer.")
            raise PoolExhausted(f"all {self.capacity} slots are in use")
        index = self._available.pop()
        self._occupied[index] = True
        return index

    def find(self, index: int) -> Optional[T]:
        """Return the object in an occupied slot, or None."""
        if not 0 <= index < self.capacity or not self._occupied[index]:
            return None
        return self._items[index]

    def remove(self, index: int) -> None:
        """Free an occupied slot; invalid or free indices are ignored."""
        if not 0 <= index < self.capacity or not self._occupied[index]:
            return
        self._occupied[index] = False
        self._available.append(index)
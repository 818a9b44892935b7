"""Bounded FIFO queue with ring-buffer semantics."""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque


class RingBufferFull(Exception):
    """Raised when pushing onto a ring buffer that has no free slot."""


class RingBufferEmpty(Exception):
    """Raised when popping from a ring buffer that holds nothing."""


class RingBuffer:
    """A fixed-size FIFO queue.

    One slot of the ring is always kept free to tell "full" from "empty",
    so a buffer of ``capacity`` slots holds at most ``capacity - 1`` items.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: Deque[Any] = deque()

    def push(self, item: Any) -> None:
        """Append ``item`` at the tail; raise RingBufferFull if there is no room."""
        if self.is_full():
            raise RingBufferFull(f"ring buffer of capacity {self.capacity} is full")
        self._items.append(item)

    def pop(self) -> Any:
        """Remove and return the item at the head; raise RingBufferEmpty if none."""
        if self.is_empty():
            raise RingBufferEmpty("ring buffer is empty")
        return self._items.popleft()

    def reset(self) -> None:
        """Discard every queued item."""
        self._items.clear()

    def drain(self, callback: Callable[[Any], None]) -> int:
        """Pass every item queued at call time to ``callback``, oldest first.

        Items pushed while draining are left for the next drain.
        Returns the number of items handled.
        """
        count = len(self._items)
        for _ in range(count):
            callback(self._items.popleft())
        return count

    def is_empty(self) -> bool:
        return not self._items

    def is_full(self) -> bool:
        return len(self._items) >= self.capacity - 1

    def __len__(self) -> int:
        return len(self._items)
"""Staging queue feeding a timing wheel that is advanced once per tick."""

from __future__ import annotations

import logging
import threading
import time
from typing import Protocol

from tcpmcast.ring_buffer import RingBuffer
from tcpmcast.time_wheel import Task, TimeWheel

log = logging.getLogger(__name__)

SLOT_COUNT = 16
TICK_INTERVAL = 1
QUEUE_CAPACITY = 8192 * 4


class _StopEvent(Protocol):
    def is_set(self) -> bool: ...

    def wait(self, timeout: float | None = None) -> bool: ...


class TaskQueue:
    """Tasks are staged here and moved onto the wheel at the next tick."""

    def __init__(
        self,
        slot_count: int = SLOT_COUNT,
        tick_interval: int = TICK_INTERVAL,
        capacity: int = QUEUE_CAPACITY,
    ) -> None:
        self.wheel = TimeWheel(slot_count, tick_interval)
        self.tick_interval = tick_interval
        self._queue = RingBuffer(capacity)
        self._lock = threading.Lock()

    def add_task(self, task: Task) -> None:
        """Stage ``task``; raises RingBufferFull when the staging queue is full."""
        with self._lock:
            self._queue.push(task)

    def tick(self) -> int:
        """Move staged tasks onto the wheel, then run the current slot.

        Returns the number of tasks run.
        """
        with self._lock:
            self._queue.drain(self.wheel.add_task)
        return self.wheel.exec_slot()

    def run(self, stop_event: _StopEvent) -> None:
        """Tick every ``tick_interval`` seconds until ``stop_event`` is set.

        Ticks missed while busy are caught up.
        """
        interval = float(self.tick_interval)
        deadline = time.monotonic() + interval
        while not stop_event.is_set():
            remaining = deadline - time.monotonic()
            if remaining > 0 and stop_event.wait(remaining):
                break
            overdue = time.monotonic() - deadline
            expirations = max(1, int(overdue // interval) + 1)
            deadline += expirations * interval
            for _ in range(expirations):
                self.tick()

    def launch(self, stop_event: _StopEvent) -> threading.Thread:
        """Start ``run`` on a daemon thread and return the thread."""
        thread = threading.Thread(target=self.run, args=(stop_event,), daemon=True)
        thread.start()
        log.info("task queue thread started...")
        return thread
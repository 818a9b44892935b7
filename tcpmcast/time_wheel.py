"""Hashed timing wheel for delayed tasks."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List

log = logging.getLogger(__name__)


class Task(ABC):
    """A unit of work run by a TimeWheel after ``time`` units have passed."""

    def __init__(self, time: int = 0) -> None:
        self.time = time
        self.rotation = 0

    @abstractmethod
    def handle(self) -> None:
        """Do the task's work when it falls due."""


class TimeWheel:
    """A ring of slots; each call to exec_slot advances the wheel by one tick."""

    def __init__(self, slot_count: int, tick_interval: int) -> None:
        if slot_count < 1:
            raise ValueError("slot_count must be at least 1")
        if tick_interval < 1:
            raise ValueError("tick_interval must be at least 1")
        self.slot_count = slot_count
        self.tick_interval = tick_interval
        self.current_slot = 0
        self._slots: List[List[Task]] = [[] for _ in range(slot_count)]

    def add_task(self, task: Task) -> int:
        """Place ``task`` in its slot and return the slot number."""
        ticks = task.time // self.tick_interval
        rotation, offset = divmod(ticks, self.slot_count)
        slot = (self.current_slot + offset) % self.slot_count
        task.rotation = rotation
        self._slots[slot].append(task)
        log.debug("Add task to slot %d (rotation=%d)", slot, rotation)
        return slot

    def exec_slot(self) -> int:
        """Run the due tasks of the current slot, then advance one slot.

        Tasks with rotations left stay in place with one rotation fewer.
        Returns the number of tasks run.
        """
        index = self.current_slot
        waiting = self._slots[index]
        self._slots[index] = []
        kept: List[Task] = []
        executed = 0
        for task in waiting:
            if task.rotation > 0:
                task.rotation -= 1
                kept.append(task)
            else:
                task.handle()
                executed += 1
        # Tasks added to this slot while handling come after the survivors.
        self._slots[index] = kept + self._slots[index]
        self.current_slot = (self.current_slot + 1) % self.slot_count
        return executed

    def pending(self) -> int:
        """Number of tasks still waiting on the wheel."""
        return sum(len(slot) for slot in self._slots)
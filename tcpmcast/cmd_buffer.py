"""Queued add/remove commands applied in batches to a HeaderBuffer."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, List, Optional

from tcpmcast.header_buffer import HeaderBuffer
from tcpmcast.ring_buffer import RingBuffer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddCommand:
    ip: int
    port: int
    mac: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "mac", bytes(self.mac))


@dataclass(frozen=True)
class DelCommand:
    ip: int
    port: int


class CommandBuffer:
    """Two bounded queues of client commands, filled by the listener and applied by the sender."""

    def __init__(self, size: int) -> None:
        self._adds = RingBuffer(size)
        self._dels = RingBuffer(size)
        self._lock = threading.Lock()

    def add_client(self, ip: int, port: int, mac: bytes) -> None:
        """Queue a command to add a client; raises RingBufferFull when the queue is full."""
        with self._lock:
            self._adds.push(AddCommand(ip, port, mac))

    def del_client(self, ip: int, port: int) -> None:
        """Queue a command to remove a client; raises RingBufferFull when the queue is full."""
        with self._lock:
            self._dels.push(DelCommand(ip, port))

    @staticmethod
    def _take(ring: RingBuffer) -> List[Any]:
        items: List[Any] = []
        ring.drain(items.append)
        return items

    def apply(self, header_buffer: HeaderBuffer) -> int:
        """Apply every queued command to ``header_buffer``; return how many were taken.

        Deletions are paired with additions so that a new client overwrites
        the header of a leaving one; leftover additions are appended and
        leftover deletions are removed.
        """
        with self._lock:
            adds: List[AddCommand] = self._take(self._adds)
            dels: List[DelCommand] = self._take(self._dels)
        if not adds and not dels:
            return 0

        targets: List[Optional[int]] = []
        for cmd in dels:
            pos = header_buffer.find_index(cmd.ip, cmd.port)
            if pos is None:
                log.warning("del target not found: %d %d", cmd.ip, cmd.port)
            targets.append(pos)

        for cmd, target in zip(adds, targets):
            if target is None:
                self._append(header_buffer, cmd)
            else:
                try:
                    header_buffer.modify(target, cmd.ip, cmd.port, cmd.mac)
                except IndexError:
                    log.warning("failed to modify, %d", target)

        for cmd in adds[len(targets):]:
            self._append(header_buffer, cmd)

        for target in targets[len(adds):]:
            if target is None:
                continue
            try:
                header_buffer.delete(target)
            except IndexError:
                log.warning("failed to del, %d", target)

        return len(adds) + len(dels)

    @staticmethod
    def _append(header_buffer: HeaderBuffer, cmd: AddCommand) -> None:
        try:
            header_buffer.append(cmd.ip, cmd.port, cmd.mac)
        except OverflowError:
            log.warning("failed to append %d %d", cmd.ip, cmd.port)
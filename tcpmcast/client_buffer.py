"""Connection state for every client, kept in reusable slots."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple

from tcpmcast.ring_buffer import RingBufferFull

log = logging.getLogger(__name__)

ACK_RING_BUFFER_SIZE = 8192


class ClientState(Enum):
    SYN = "syn"  # first handshake seen, waiting for the third
    CONNECTED = "connected"  # handshake complete
    FIN = "fin"  # first close seen, about to disconnect


@dataclass
class PendingAck:
    seq_num: int = 0
    ack_num: int = 0
    timestamp: int = 0
    ack_count: int = 0


class AckState:
    """Segments sent to a client that still await acknowledgement, oldest first."""

    def __init__(self, capacity: int = ACK_RING_BUFFER_SIZE) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.next_seq = 0
        self._pending: Deque[PendingAck] = deque()

    def reset(self) -> None:
        """Forget every outstanding segment."""
        self._pending.clear()
        self.next_seq = 0

    def append(self, length: int) -> PendingAck:
        """Record a sent segment of ``length`` bytes and return its entry."""
        if length < 0:
            raise ValueError("length must not be negative")
        if len(self._pending) >= self.capacity - 1:
            raise RingBufferFull("too many unacknowledged segments")
        entry = PendingAck(seq_num=self.next_seq, ack_num=self.next_seq + length)
        self._pending.append(entry)
        self.next_seq = entry.ack_num
        return entry

    def ack(self, ack_num: int) -> int:
        """Drop segments covered by ``ack_num``; return how many were dropped.

        An acknowledgement that covers nothing counts as a duplicate against
        the oldest outstanding segment.
        """
        acked = 0
        while self._pending and self._pending[0].ack_num <= ack_num:
            self._pending.popleft()
            acked += 1
        if not acked and self._pending:
            self._pending[0].ack_count += 1
        return acked

    @property
    def pending(self) -> Tuple[PendingAck, ...]:
        return tuple(self._pending)


@dataclass
class ClientInfo:
    ip: int = 0
    port: int = 0
    state: ClientState = ClientState.SYN
    last_packet_number: int = 0
    expect_seq: int = 0
    syn_retry_times: int = 0
    ack_state: AckState = field(default_factory=AckState)

    def reset(self, ip: int, port: int) -> None:
        """Prepare this slot for a new client that has just sent SYN."""
        self.ip = ip
        self.port = port
        self.state = ClientState.SYN
        self.last_packet_number = 0
        self.expect_seq = 0
        self.syn_retry_times = 0
        # The ack queue belongs to the slot and is reused by the next client.
        self.ack_state.reset()


class ClientBufferFull(Exception):
    """Raised when no slot is free for a new client."""


class ClientBuffer:
    """Fixed set of client slots looked up by (ip, port)."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self._slots: List[ClientInfo] = [ClientInfo() for _ in range(capacity)]
        self._index: Dict[Tuple[int, int], int] = {}
        self._available: List[int] = list(range(capacity - 1, -1, -1))

    def insert(self, ip: int, port: int) -> int:
        """Claim a slot for a new client and return its position."""
        key = (ip, port)
        if key in self._index:
            raise ValueError(f"client already present: {ip} {port}")
        if not self._available:
            log.warning("no available place for new client in client buffer.")
            raise ClientBufferFull(f"all {self.capacity} client slots are in use")
        pos = self._available.pop()
        self._slots[pos].reset(ip, port)
        self._index[key] = pos
        return pos

    def find(self, ip: int, port: int) -> Optional[ClientInfo]:
        pos = self._index.get((ip, port))
        return None if pos is None else self._slots[pos]

    def remove(self, ip: int, port: int) -> bool:
        """Release the client's slot; return False if it was not present."""
        pos = self._index.pop((ip, port), None)
        if pos is None:
            log.warning("not found in client_buffer: %d %d", ip, port)
            return False
        self._available.append(pos)
        return True

    def __len__(self) -> int:
        return len(self._index)
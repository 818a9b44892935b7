"""Per-client packet headers used as templates for multicast sends."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

log = logging.getLogger(__name__)

MAC_LENGTH = 6


@dataclass(frozen=True)
class Header:
    """Destination fields of one client's Ethernet/IPv4/TCP header."""

    mac: bytes
    ip: int
    port: int

    def __post_init__(self) -> None:
        mac = bytes(self.mac)
        if len(mac) != MAC_LENGTH:
            raise ValueError(f"MAC address must be {MAC_LENGTH} bytes, got {len(mac)}")
        if not 0 <= self.ip <= 0xFFFFFFFF:
            raise ValueError(f"IPv4 address out of range: {self.ip}")
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")
        object.__setattr__(self, "mac", mac)


class HeaderBuffer:
    """A dense, bounded list of headers; deletion moves the last header into the hole."""

    def __init__(self, max_size: int) -> None:
        if max_size < 0:
            raise ValueError("max_size must not be negative")
        self.max_size = max_size
        self._headers: List[Header] = []

    def find_index(self, ip: int, port: int) -> Optional[int]:
        """Return the position of the header for ``ip``/``port``, or None."""
        return next(
            (i for i, header in enumerate(self._headers) if header.ip == ip and header.port == port),
            None,
        )

    def append(self, ip: int, port: int, mac: bytes) -> int:
        """Add a header at the end and return its position."""
        if len(self._headers) >= self.max_size:
            log.warning("no space for appending")
            raise OverflowError(f"header buffer is full ({self.max_size} headers)")
        self._headers.append(Header(mac, ip, port))
        return len(self._headers) - 1

    def modify(self, index: int, ip: int, port: int, mac: bytes) -> None:
        """Overwrite the header at ``index``."""
        self._check_index(index, "modify")
        self._headers[index] = Header(mac, ip, port)

    def delete(self, index: int) -> None:
        """Remove the header at ``index`` by moving the last header into its place."""
        if not self._headers:
            raise IndexError("no header to delete")
        self._check_index(index, "delete")
        last = self._headers.pop()
        if index < len(self._headers):
            self._headers[index] = last

    def _check_index(self, index: int, action: str) -> None:
        if not 0 <= index < len(self._headers):
            raise IndexError(f"{action} index out of range: {index}")

    def __len__(self) -> int:
        return len(self._headers)

    def __iter__(self) -> Iterator[Header]:
        return iter(list(self._headers))
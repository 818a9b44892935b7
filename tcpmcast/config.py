"""Server-wide settings and IPv4 address helpers."""

from __future__ import annotations

from dataclasses import dataclass


def ipv4(a: int, b: int, c: int, d: int) -> int:
    """Pack four octets, most significant first, into a 32-bit address."""
    octets = (a, b, c, d)
    for octet in octets:
        if not 0 <= octet <= 0xFF:
            raise ValueError(f"IPv4 octet out of range: {octet}")
    return (a << 24) | (b << 16) | (c << 8) | d


def format_ipv4(ip: int) -> str:
    """Render a 32-bit address in dotted-quad form."""
    if not 0 <= ip <= 0xFFFFFFFF:
        raise ValueError(f"IPv4 address out of range: {ip}")
    return ".".join(str((ip >> shift) & 0xFF) for shift in (24, 16, 8, 0))


@dataclass(frozen=True)
class ServerConfig:
    """Addresses and sizing of the server."""

    ip: int = ipv4(192, 168, 1, 152)
    port: int = 12345
    mac: bytes = b"\x02\x00\x00\x00\x00\x01"
    port_id: int = 0
    max_clients: int = 10
    buffer_size: int = 1024
    send_interval: int = 1
    heartbeat_msg: str = "Server heartbeat"
    num_mbufs: int = 8191
    mbuf_cache_size: int = 250
    burst_size: int = 32
    syn_task_buffer_capacity: int = 8192 * 4

    def __post_init__(self) -> None:
        mac = bytes(self.mac)
        if len(mac) != 6:
            raise ValueError(f"MAC address must be 6 bytes, got {len(mac)}")
        if not 0 <= self.ip <= 0xFFFFFFFF:
            raise ValueError(f"IPv4 address out of range: {self.ip}")
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")
        if self.burst_size < 1:
            raise ValueError("burst_size must be at least 1")
        object.__setattr__(self, "mac", mac)
"""Receive loop that passes incoming frames to a packet handler."""

from __future__ import annotations

import argparse
import logging
import socket
import struct
import threading
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from tcpmcast.client_buffer import ClientBuffer
from tcpmcast.config import ServerConfig

log = logging.getLogger(__name__)

_ETH_HEADER = 14
_IPV4_MIN_HEADER = 20
_ETH_P_ALL = 0x0003
_MAX_FRAME = 65535


class _Handler(Protocol):
    def handle_packet(self, frame: bytes) -> bool: ...


class _StopEvent(Protocol):
    def is_set(self) -> bool: ...


def source_ip(frame: bytes) -> int:
    """Source IPv4 address of an Ethernet/IPv4 frame."""
    if len(frame) < _ETH_HEADER + _IPV4_MIN_HEADER:
        raise ValueError("truncated IPv4 header")
    (ip,) = struct.unpack_from("!I", frame, _ETH_HEADER + 12)
    return ip


def source_port(frame: bytes) -> int:
    """Source TCP port of an Ethernet/IPv4/TCP frame."""
    if len(frame) < _ETH_HEADER + _IPV4_MIN_HEADER:
        raise ValueError("truncated IPv4 header")
    ihl = (frame[_ETH_HEADER] & 0x0F) * 4
    if ihl < _IPV4_MIN_HEADER:
        raise ValueError(f"invalid IPv4 header length: {ihl}")
    offset = _ETH_HEADER + ihl
    if len(frame) < offset + 2:
        raise ValueError("truncated TCP header")
    (port,) = struct.unpack_from("!H", frame, offset)
    return port


class Listener:
    """Polls ``receive`` for bursts of frames until ``stop_event`` is set."""

    def __init__(
        self,
        handler: _Handler,
        receive: Callable[[], Iterable[bytes]],
        stop_event: _StopEvent,
    ) -> None:
        self.handler = handler
        self.receive = receive
        self.stop_event = stop_event

    def run(self) -> int:
        """Handle frames until stopped; return how many were handled."""
        handled = 0
        while not self.stop_event.is_set():
            for frame in self.receive():
                self.handler.handle_packet(frame)
                handled += 1
        return handled


def _socket_receiver(sock: socket.socket, burst: int) -> Callable[[], List[bytes]]:
    def receive() -> List[bytes]:
        frames: List[bytes] = []
        try:
            frames.append(sock.recv(_MAX_FRAME))
        except (socket.timeout, BlockingIOError):
            return frames
        while len(frames) < burst:
            try:
                frames.append(sock.recv(_MAX_FRAME, socket.MSG_DONTWAIT))
            except (BlockingIOError, socket.timeout):
                break
        return frames

    return receive


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Listen for clients on a network interface until interrupted."""
    from tcpmcast.packet import PacketHandler

    parser = argparse.ArgumentParser(description="Accept TCP clients for multicast sending.")
    parser.add_argument("interface", nargs="?", default="eth0", help="network interface to listen on")
    args = parser.parse_args(argv)

    family = getattr(socket, "AF_PACKET", None)
    if family is None:
        parser.error("raw packet sockets are not available on this platform")

    logging.basicConfig(level=logging.INFO)
    config = ServerConfig()
    clients = ClientBuffer(config.max_clients)

    with socket.socket(family, socket.SOCK_RAW, socket.htons(_ETH_P_ALL)) as sock:
        sock.bind((args.interface, 0))
        sock.settimeout(0.1)
        handler = PacketHandler(config, sock.send, clients)
        stop = threading.Event()
        listener = Listener(handler, _socket_receiver(sock, config.burst_size), stop)
        thread = threading.Thread(target=listener.run, daemon=True)
        thread.start()
        print("listening started...")
        try:
            while thread.is_alive():
                thread.join(0.5)
        except KeyboardInterrupt:
            stop.set()
            thread.join()
    return 0
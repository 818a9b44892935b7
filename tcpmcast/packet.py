"""Classifying received frames and answering them."""

from __future__ import annotations

import logging
import struct
from enum import Enum
from typing import Any, Callable, Tuple

from tcpmcast.client_buffer import ClientBuffer, ClientBufferFull, ClientState
from tcpmcast.config import ServerConfig, format_ipv4

log = logging.getLogger(__name__)

_ETH = struct.Struct("!6s6sH")
_ARP = struct.Struct("!HHBBH6sI6sI")
_TCP = struct.Struct("!HHIIBB")
_IPV4_MIN_HEADER = 20

ETHER_TYPE_IPV4 = 0x0800
ETHER_TYPE_ARP = 0x0806
IPPROTO_TCP = 6
ARP_HRD_ETHER = 1
ARP_OP_REQUEST = 1
ARP_OP_REPLY = 2
TCP_SYN_FLAG = 0x02
TCP_ACK_FLAG = 0x10


class PacketType(Enum):
    ARP_REQ = "arp_req"
    TCP_SYN = "tcp_syn"
    TCP_SYN_CONFIRM = "tcp_syn_confirm"
    TCP_ACK = "tcp_ack"
    TCP_CLOSE = "tcp_close"
    TCP_CLOSE_CONFIRM = "tcp_close_confirm"
    NO_SUPPORT = "no_support"


def _tcp_offset(frame: bytes) -> int:
    ip_off = _ETH.size
    if len(frame) < ip_off + _IPV4_MIN_HEADER:
        raise ValueError("truncated IPv4 header")
    ihl = (frame[ip_off] & 0x0F) * 4
    if ihl < _IPV4_MIN_HEADER:
        raise ValueError(f"invalid IPv4 header length: {ihl}")
    tcp_off = ip_off + ihl
    if len(frame) < tcp_off + _TCP.size:
        raise ValueError("truncated TCP header")
    return tcp_off


def _endpoints(frame: bytes) -> Tuple[int, int, int, int, int, int]:
    """Return (src_ip, dst_ip, src_port, dst_port, ack, flags) of a TCP frame."""
    tcp_off = _tcp_offset(frame)
    src_ip, dst_ip = struct.unpack_from("!II", frame, _ETH.size + 12)
    src_port, dst_port, _seq, ack, _data_off, flags = _TCP.unpack_from(frame, tcp_off)
    return src_ip, dst_ip, src_port, dst_port, ack, flags


def classify(frame: bytes, config: ServerConfig) -> PacketType:
    """Work out what kind of packet ``frame`` is; raise ValueError if truncated."""
    frame = bytes(frame)
    if len(frame) < _ETH.size:
        raise ValueError("truncated Ethernet header")
    _dst, _src, ether_type = _ETH.unpack_from(frame)
    if ether_type == ETHER_TYPE_ARP:
        return PacketType.ARP_REQ

    if len(frame) < _ETH.size + _IPV4_MIN_HEADER:
        raise ValueError("truncated IPv4 header")
    proto = frame[_ETH.size + 9]
    if proto != IPPROTO_TCP:
        log.debug("Not a TCP packet: %d", proto)
        return PacketType.NO_SUPPORT

    src_ip, dst_ip, src_port, dst_port, ack, flags = _endpoints(frame)
    log.debug("TCP packet: %s:%d", format_ipv4(src_ip), src_port)
    if dst_ip != config.ip or dst_port != config.port:
        log.debug("target is not correct %s %d", format_ipv4(dst_ip), dst_port)
        return PacketType.NO_SUPPORT

    if flags & TCP_SYN_FLAG:
        return PacketType.TCP_SYN
    if flags & TCP_ACK_FLAG:
        return PacketType.TCP_SYN_CONFIRM if ack == 1 else PacketType.TCP_ACK
    log.debug("received tcp pkt type no support")
    return PacketType.NO_SUPPORT


def build_arp_reply(frame: bytes, config: ServerConfig) -> bytes:
    """Build the reply to an ARP request for the server's address.

    Raises ValueError if ``frame`` is not such a request.
    """
    frame = bytes(frame)
    if len(frame) < _ETH.size + _ARP.size:
        raise ValueError("truncated ARP packet")
    _hrd, _pro, _hln, _pln, opcode, sha, sip, _tha, tip = _ARP.unpack_from(frame, _ETH.size)
    if opcode != ARP_OP_REQUEST:
        raise ValueError(f"not an ARP request: opcode {opcode}")
    if tip != config.ip:
        raise ValueError(f"ARP request is for {format_ipv4(tip)}, not this server")

    ethernet = _ETH.pack(sha, config.mac, ETHER_TYPE_ARP)
    arp = _ARP.pack(
        ARP_HRD_ETHER,
        ETHER_TYPE_IPV4,
        6,
        4,
        ARP_OP_REPLY,
        config.mac,
        config.ip,
        sha,
        sip,
    )
    return ethernet + arp


class PacketHandler:
    """Dispatches received frames by type."""

    def __init__(
        self,
        config: ServerConfig,
        transmit: Callable[[bytes], Any],
        clients: ClientBuffer,
    ) -> None:
        self.config = config
        self.transmit = transmit
        self.clients = clients

    def handle_packet(self, frame: bytes) -> bool:
        """Handle one frame; return True if it was acted on."""
        try:
            kind = classify(frame, self.config)
        except ValueError as exc:
            log.warning("invalid packet: %s", exc)
            return False

        if kind is PacketType.ARP_REQ:
            return self._handle_arp_req(frame)
        if kind is PacketType.TCP_SYN:
            return self._handle_tcp_syn(frame)
        if kind is PacketType.TCP_SYN_CONFIRM:
            return self._handle_tcp_syn_confirm(frame)
        return False

    def _handle_arp_req(self, frame: bytes) -> bool:
        try:
            reply = build_arp_reply(frame, self.config)
        except ValueError as exc:
            log.debug("arp ignored: %s", exc)
            return False
        self.transmit(reply)
        log.debug("handled arp req")
        return True

    def _handle_tcp_syn(self, frame: bytes) -> bool:
        src_ip, _dst_ip, src_port, *_rest = _endpoints(bytes(frame))
        if self.clients.find(src_ip, src_port) is not None:
            return False
        try:
            self.clients.insert(src_ip, src_port)
        except ClientBufferFull:
            return False
        return True

    def _handle_tcp_syn_confirm(self, frame: bytes) -> bool:
        src_ip, _dst_ip, src_port, *_rest = _endpoints(bytes(frame))
        client = self.clients.find(src_ip, src_port)
        if client is None:
            return False
        client.state = ClientState.CONNECTED
        return True
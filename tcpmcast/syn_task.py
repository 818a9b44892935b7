"""Timed check that retransmits SYN-ACK until the handshake completes."""

from __future__ import annotations

import logging

from tcpmcast.client_buffer import ClientBuffer, ClientInfo, ClientState
from tcpmcast.ring_buffer import RingBufferFull
from tcpmcast.task_queue import TaskQueue
from tcpmcast.time_wheel import Task

log = logging.getLogger(__name__)

SYN_RETRY_LIMIT = 6


class SynTask(Task):
    """Checks whether a client completed the handshake; retries with doubling delays."""

    def __init__(
        self,
        ip: int,
        port: int,
        clients: ClientBuffer,
        queue: TaskQueue,
        time: int = 0,
    ) -> None:
        super().__init__(time)
        self.ip = ip
        self.port = port
        self.clients = clients
        self.queue = queue

    def handle(self) -> None:
        client_info = self.clients.find(self.ip, self.port)
        if client_info is None:
            log.warning("client not found in buffer: %d %d", self.ip, self.port)
            return
        if client_info.state is ClientState.SYN:
            self.try_syn_retrans(client_info)

    def try_syn_retrans(self, client_info: ClientInfo) -> None:
        """Schedule another check, or drop the client once the retry limit is hit."""
        if client_info.syn_retry_times >= SYN_RETRY_LIMIT:
            log.warning("failed to connect with client: %d %d", self.ip, self.port)
            self.clients.remove(self.ip, self.port)
            return
        retry = SynTask(
            self.ip,
            self.port,
            self.clients,
            self.queue,
            time=1 << client_info.syn_retry_times,
        )
        try:
            self.queue.add_task(retry)
        except RingBufferFull:
            log.warning("failed to add task for %d %d", self.ip, self.port)
        client_info.syn_retry_times += 1

    def confirm_connect(self, client_info: ClientInfo) -> None:
        client_info.state = ClientState.CONNECTED
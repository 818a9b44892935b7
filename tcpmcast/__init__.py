"""Core of a user-space TCP fan-out server: packet handling, client tables and retransmission timers."""

__version__ = "0.1.0"
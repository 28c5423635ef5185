"""
Constants Module for Artco

Contains the protocol event names, default values and
static configuration shared by the engine and its probers.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class ProtocolEvent(str, Enum):
    """
    Protocol Event Enumeration

    Event names carried by every message exchanged between the
    engine and a worker.
    """

    PING = "ping"
    WARMUP = "warmup"

    @classmethod
    def from_value(cls, value: object) -> "ProtocolEvent | None":
        """Return the matching event, or None for an unknown one."""
        try:
            return cls(value)
        except ValueError:
            return None


class Defaults:
    """Default values used when no configuration is supplied."""

    PING_INTERVAL_MILLIS: Final[int] = 1000
    TIMEOUT_UNTIL_FIRST_PING: Final[int] = 0
    WORKER_TERMINATE_TIMEOUT: Final[float] = 5.0

    STATUS_HOST: Final[str] = "0.0.0.0"
    STATUS_PORT: Final[int] = 8080

    USER_AGENT: Final[str] = "Artco/1.0 (+service watcher)"
    TCP_DEFAULT_PORT: Final[int] = 80


class Limits:
    """Hard limits applied to diagnostics and payloads."""

    MAX_REASON_LENGTH: Final[int] = 200
    MAX_URL_LENGTH: Final[int] = 2048

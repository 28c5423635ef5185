"""
Monitoring Exception Classes for Artco

Errors raised by the engine, its workers and the probe protocol.
None of them is fatal to the engine: they are raised to the caller
of a single operation or logged by the dispatch path.
"""

from __future__ import annotations

from typing import Any, Optional

from artco.exceptions.base import ArtcoException


class MonitoringException(ArtcoException):
    """
    Base Monitoring Exception

    Parent class for all engine-side monitoring errors.
    """

    default_error_code = 2000
    default_recoverable = True

    def __init__(
        self,
        message: str,
        identity: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize monitoring exception.

        Args:
            message: Error message
            identity: Identity of the service watcher involved
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        if identity is not None:
            self.details["identity"] = identity


class RegistrationError(MonitoringException):
    """Raised when a service watcher cannot be registered."""

    default_error_code = 2001


class WorkerError(MonitoringException):
    """Raised when a worker cannot deliver or accept a message."""

    default_error_code = 2100


class WorkerTerminatedError(WorkerError):
    """
    Worker Terminated Error

    Raised when a message is sent to a worker after ``terminate()``.
    """

    default_error_code = 2101

    def __init__(self, message: str = "Worker has been terminated", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ProtocolError(MonitoringException):
    """
    Protocol Error

    Raised when a message carries a known event but cannot be
    decoded into a protocol message.
    """

    default_error_code = 2200

    def __init__(
        self,
        message: str,
        event: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if event:
            self.details["event"] = event

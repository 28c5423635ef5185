"""
Exceptions Package for Artco

Provides the exception hierarchy used by the monitoring engine,
its workers and the bundled probers.
"""

from artco.exceptions.base import (
    ArtcoException,
    ConfigurationError,
)

from artco.exceptions.monitoring import (
    MonitoringException,
    RegistrationError,
    WorkerError,
    WorkerTerminatedError,
    ProtocolError,
)

from artco.exceptions.validation import (
    ValidationException,
    InvalidURLError,
)

__all__ = [
    # Base exceptions
    "ArtcoException",
    "ConfigurationError",

    # Monitoring exceptions
    "MonitoringException",
    "RegistrationError",
    "WorkerError",
    "WorkerTerminatedError",
    "ProtocolError",

    # Validation exceptions
    "ValidationException",
    "InvalidURLError",
]

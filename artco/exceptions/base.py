"""
Base Exception Classes for Artco

Every error raised by the engine, its workers and the bundled
probers derives from ArtcoException.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class ArtcoException(Exception):
    """
    Root of the Artco exception hierarchy.

    Subclasses pick their numeric code and recoverability through the
    ``default_error_code`` / ``default_recoverable`` class attributes;
    structured context goes into ``details`` so it survives ``to_dict``.
    """

    default_error_code: int = 1000
    default_recoverable: bool = True

    def __init__(
        self,
        message: str = "Artco error",
        error_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code if error_code is not None else self.default_error_code
        self.details: Dict[str, Any] = dict(details or {})
        self.cause = cause
        self.recoverable = self.default_recoverable if recoverable is None else recoverable
        self.timestamp = datetime.now(timezone.utc)

    @property
    def full_message(self) -> str:
        """Message prefixed with the error code, e.g. ``[2001] ...``."""
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form, used by the status server and structured logs."""
        return {
            "type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
            "cause": repr(self.cause) if self.cause is not None else None,
        }

    def log_format(self) -> str:
        """One-line ``key: value | ...`` rendering for log messages."""
        segments = [
            f"Exception: {type(self).__name__}",
            f"Code: {self.error_code}",
            f"Message: {self.message}",
        ]
        if self.details:
            segments.append(
                "Details: " + ", ".join(f"{key}={value}" for key, value in self.details.items())
            )
        if self.cause is not None:
            segments.append(f"Cause: {self.cause!r}")
        return " | ".join(segments)

    def __str__(self) -> str:
        return self.full_message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, error_code={self.error_code})"


class ConfigurationError(ArtcoException):
    """A prober or the engine was given settings it cannot run with."""

    default_error_code = 1100
    default_recoverable = False

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        if config_key:
            self.details["config_key"] = config_key

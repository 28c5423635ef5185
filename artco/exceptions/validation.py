"""
Validation Exception Classes for Artco

Raised while building a prober from user supplied targets.
"""

from __future__ import annotations

from typing import Any, Optional

from artco.exceptions.base import ArtcoException


# Values longer than this are cut before they land in ``details``
_MAX_DETAIL_VALUE = 100


class ValidationException(ArtcoException):
    """A prober target or option failed validation."""

    default_error_code = 3000
    default_recoverable = True

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        if field:
            self.details["field"] = field
        if value is not None:
            text = str(value)
            if len(text) > _MAX_DETAIL_VALUE:
                text = text[:_MAX_DETAIL_VALUE] + "..."
            self.details["value"] = text


class InvalidURLError(ValidationException):
    """
    Invalid URL Error

    ``reason`` is one of ``empty``, ``too_long``, ``no_scheme``,
    ``invalid_domain`` or ``invalid_port``.
    """

    default_error_code = 3001

    def __init__(
        self,
        message: str = "Invalid URL format",
        url: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, field="url", value=url, **kwargs)
        if reason:
            self.details["reason"] = reason

"""
============================================================================
ARTCO - HELPERS UTILITY
============================================================================
Small formatting helpers shared by the engine, probers and status server.
============================================================================
"""

from datetime import datetime, timezone
from typing import Optional

from artco.config.constants import Limits


# ============================================================================
# TIME UTILITIES
# ============================================================================

_UNITS = (("d", 86400), ("h", 3600), ("m", 60), ("s", 1))


class TimeHelper:
    """
    Duration and timestamp formatting.
    """

    @staticmethod
    def seconds_to_human_readable(seconds: int) -> str:
        """
        Render a duration as e.g. ``"1d 2h 5s"``; zero units are omitted.

        Negative durations render as ``"0s"``.
        """
        remaining = max(int(seconds), 0)
        parts = []
        for suffix, size in _UNITS:
            amount, remaining = divmod(remaining, size)
            if amount:
                parts.append(f"{amount}{suffix}")
        return " ".join(parts) or "0s"

    @staticmethod
    def millis_to_human_readable(millis: float) -> str:
        """Like seconds_to_human_readable, but keeps sub-second values in ms."""
        if 0 <= millis < 1000:
            return f"{int(millis)}ms"
        return TimeHelper.seconds_to_human_readable(int(millis // 1000))

    @staticmethod
    def millis_to_iso(timestamp_millis: float) -> Optional[str]:
        """Epoch milliseconds to ISO-8601 (UTC); 0 means "never" and gives None."""
        if not timestamp_millis:
            return None
        return datetime.fromtimestamp(timestamp_millis / 1000.0, tz=timezone.utc).isoformat()


# ============================================================================
# STRING UTILITIES
# ============================================================================

class StringHelper:

    @staticmethod
    def truncate(text: str, max_length: int = Limits.MAX_REASON_LENGTH, suffix: str = "...") -> str:
        """Cut *text* to at most *max_length* characters, marking the cut with *suffix*."""
        if len(text) <= max_length:
            return text
        return text[:max_length - len(suffix)] + suffix

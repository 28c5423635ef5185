"""
============================================================================
ARTCO - VALIDATORS UTILITY
============================================================================
Validation and parsing of the targets handed to the bundled probers.
============================================================================
"""

from typing import Tuple
from urllib.parse import urlparse

import validators as external_validators

from artco.config.constants import Defaults, Limits
from artco.exceptions.validation import InvalidURLError


# ============================================================================
# URL VALIDATORS
# ============================================================================

class URLValidator:
    """
    URL validation and host/port parsing.
    """

    @staticmethod
    def is_valid_url(url: str) -> bool:
        """
        Check if URL is a valid http(s) URL.

        Args:
            url: URL to validate

        Returns:
            True if valid, False otherwise
        """
        if not url or len(url) > Limits.MAX_URL_LENGTH:
            return False

        if urlparse(url).scheme not in ("http", "https"):
            return False

        # validators.url returns a ValidationError instance (falsy) on failure
        return bool(external_validators.url(url, simple_host=True))

    @staticmethod
    def validate_url(url: str) -> str:
        """
        Return *url* unchanged, or raise InvalidURLError.
        """
        if not url:
            raise InvalidURLError("URL cannot be empty", url=url, reason="empty")

        if len(url) > Limits.MAX_URL_LENGTH:
            raise InvalidURLError(url=url, reason="too_long")

        if urlparse(url).scheme not in ("http", "https"):
            raise InvalidURLError(url=url, reason="no_scheme")

        if not URLValidator.is_valid_url(url):
            raise InvalidURLError(url=url, reason="invalid_domain")

        return url

    @staticmethod
    def parse_host_port(target: str, default_port: int = Defaults.TCP_DEFAULT_PORT) -> Tuple[str, int]:
        """
        Extract (host, port) from a TCP-style target string.

        Accepts ``tcp://host:port``, ``host:port`` or a bare host.
        """
        target = target.strip()
        # Strip protocol prefix if present
        for prefix in ("tcp://", "http://", "https://"):
            if target.lower().startswith(prefix):
                target = target[len(prefix):]
                break
        # Strip trailing path
        target = target.split("/")[0]
        if not target:
            raise InvalidURLError("TCP target has no host", url=target, reason="invalid_domain")

        host, port = target, None
        if target.startswith("["):
            # IPv6 literal: [::1] or [::1]:5432
            host, _, rest = target[1:].partition("]")
            if rest.startswith(":"):
                port = rest[1:]
        elif ":" in target:
            host, _, port = target.rpartition(":")

        if not host:
            raise InvalidURLError("TCP target has no host", url=target, reason="invalid_domain")
        if port is None:
            return host, default_port
        try:
            return host, int(port)
        except ValueError:
            raise InvalidURLError(
                f"Invalid port in TCP target: {port}", url=target, reason="invalid_port"
            )

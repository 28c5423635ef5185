"""
============================================================================
ARTCO - HTTP PROBER
============================================================================
Checks a service by sending one HTTP request per PingRequest using an
httpx AsyncClient.

    • any response counts as available, unless expected_status_codes is set
    • a transport error produces an unavailable result with the error text
    • when request_timeout_millis is set, a request that takes longer is
      abandoned and reported as unavailable ("Request timed out after ...")

The client is created in ``warmup`` so it belongs to the worker's own
event loop, and closed when the worker terminates.
============================================================================
"""

import asyncio
from typing import Dict, Optional, Set

import httpx

from artco.config.settings import get_settings
from artco.exceptions.base import ConfigurationError
from artco.monitoring.protocol import HttpPingResult, PingRequest, PingResult
from artco.monitoring.worker import Prober
from artco.utils.clock import Clock
from artco.utils.helpers import StringHelper
from artco.utils.logger import get_logger
from artco.utils.validators import URLValidator


logger = get_logger("HttpProber")

SUPPORTED_METHODS = frozenset({"GET", "HEAD", "POST", "OPTIONS"})


class HttpProber(Prober):
    """
    HTTP / HTTPS prober.

    Parameters
    ----------
    url : str
        Target URL; validated on construction (InvalidURLError).
    request_timeout_millis : int | None
        Per-request timeout. Defaults to the monitoring settings value.
    method : str
        HTTP method, GET by default.
    headers : dict | None
        Extra request headers.
    expected_status_codes : set[int] | None
        Status codes that count as available. None accepts any response.
    transport : httpx.AsyncBaseTransport | None
        Custom transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        url: str,
        request_timeout_millis: Optional[int] = None,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        expected_status_codes: Optional[Set[int]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings().monitoring
        self.url = URLValidator.validate_url(url)
        self.request_timeout_millis = (
            request_timeout_millis if request_timeout_millis is not None
            else settings.http_request_timeout_millis
        )
        self.method = method.upper()
        if self.method not in SUPPORTED_METHODS:
            raise ConfigurationError(
                f"Unsupported HTTP method for prober: {method}", config_key="method"
            )
        self.headers = dict(headers or {})
        self.headers.setdefault("User-Agent", settings.user_agent)
        self.expected_status_codes = expected_status_codes
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def warmup(self) -> bool:
        timeout = (
            httpx.Timeout(self.request_timeout_millis / 1000.0)
            if self.request_timeout_millis else httpx.Timeout(None)
        )
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=self.headers,
            transport=self._transport,
        )
        return True

    async def ping(self, request: PingRequest) -> PingResult:
        if self._client is None:
            await self.warmup()

        clock = Clock()
        clock.start()
        try:
            call = self._client.request(self.method, self.url)
            if self.request_timeout_millis:
                response = await asyncio.wait_for(call, self.request_timeout_millis / 1000.0)
            else:
                response = await call
        except (asyncio.TimeoutError, httpx.TimeoutException):
            elapsed = clock.stop()
            logger.warning(f"[HTTP] {self.url} timed out after {self.request_timeout_millis}ms")
            return PingResult(
                service_is_available=False,
                elapsed_time_millis=elapsed,
                reason=f"Request timed out after {self.request_timeout_millis} milliseconds",
            )
        except httpx.HTTPError as e:
            elapsed = clock.stop()
            logger.warning(f"[HTTP] {self.url} → {type(e).__name__}: {e}")
            return PingResult(
                service_is_available=False,
                elapsed_time_millis=elapsed,
                reason=StringHelper.truncate(f"Request thrown an error: {e}"),
            )

        elapsed = clock.stop()
        available = (
            self.expected_status_codes is None
            or response.status_code in self.expected_status_codes
        )
        reason = None
        if not available:
            reason = (
                f"Unexpected status {response.status_code} "
                f"(expected {sorted(self.expected_status_codes)})"
            )

        logger.debug(f"[HTTP] {self.url} → {response.status_code} in {elapsed:.1f}ms")
        return HttpPingResult(
            service_is_available=available,
            elapsed_time_millis=elapsed,
            reason=reason,
            status_code=response.status_code,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

"""
TCP connect prober.

Use-case: verify that a port is reachable even when no HTTP endpoint
is exposed (database ports, SMTP, custom servers). The target is
``tcp://host:port``, ``host:port`` or a bare host (port 80).
"""

import asyncio
from typing import Optional

from artco.config.settings import get_settings
from artco.monitoring.protocol import PingRequest, PingResult
from artco.monitoring.worker import Prober
from artco.utils.clock import Clock
from artco.utils.helpers import StringHelper
from artco.utils.logger import get_logger
from artco.utils.validators import URLValidator


logger = get_logger("TcpProber")


class TcpProber(Prober):
    """Opens a TCP connection per request, measures connect latency, closes."""

    def __init__(self, target: str, timeout_millis: Optional[int] = None):
        self.host, self.port = URLValidator.parse_host_port(target)
        self.timeout_millis = (
            timeout_millis if timeout_millis is not None
            else get_settings().monitoring.http_request_timeout_millis
        )

    async def ping(self, request: PingRequest) -> PingResult:
        clock = Clock()
        clock.start()
        timeout = self.timeout_millis / 1000.0 if self.timeout_millis else None

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            elapsed = clock.stop()
            logger.warning(f"[TCP] {self.host}:{self.port} → timed out after {self.timeout_millis}ms")
            return PingResult(
                service_is_available=False,
                elapsed_time_millis=elapsed,
                reason=f"TCP connection to {self.host}:{self.port} timed out",
            )
        except OSError as e:
            elapsed = clock.stop()
            logger.warning(f"[TCP] {self.host}:{self.port} → {e}")
            return PingResult(
                service_is_available=False,
                elapsed_time_millis=elapsed,
                reason=StringHelper.truncate(f"TCP connection refused or failed: {e}"),
            )

        elapsed = clock.stop()

        # Only connectivity matters, close right away
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass  # best-effort close

        logger.debug(f"[TCP] {self.host}:{self.port} → connected in {elapsed:.1f}ms")
        return PingResult(service_is_available=True, elapsed_time_millis=elapsed)

"""Trivial prober that always reports the service as available."""

from artco.monitoring.protocol import PingRequest, PingResult
from artco.monitoring.worker import Prober
from artco.utils.clock import Clock
from artco.utils.logger import get_logger


logger = get_logger("EchoProber")


class EchoProber(Prober):
    """
    Answers every request immediately with an available result.

    Useful to check the engine itself is polling, and as the smallest
    example of a prober.
    """

    async def ping(self, request: PingRequest) -> PingResult:
        clock = Clock()
        clock.start()
        logger.debug(f"Ping ({request.target_identity})")
        return PingResult(service_is_available=True, elapsed_time_millis=clock.stop())

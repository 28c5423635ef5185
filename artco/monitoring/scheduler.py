"""
============================================================================
ARTCO - POLLING SCHEDULER
============================================================================
A single asyncio task drives every watcher: after an optional initial
delay it runs one polling pass immediately, then one pass every
``ping_interval_millis`` until stopped.

A polling pass walks the registry and sends one PingRequest to each
watcher that is
    • ready (its prober sent ReadySignal(is_ready=True)),
    • backed by a live worker,
    • outside its own minimum repoll interval, if it has one.

Requests are fire-and-forget: the scheduler never waits for a PingResult,
so a slow prober without a minimum interval may have several requests
outstanding at once.
============================================================================
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from artco.config.settings import StartupConfiguration
from artco.monitoring.registry import WatcherRegistry
from artco.utils.clock import now_millis
from artco.utils.helpers import TimeHelper
from artco.utils.logger import get_logger


logger = get_logger("Scheduler")


class PollingScheduler:
    """
    Asyncio-based polling scheduler.

    Usage
    -----
        scheduler = PollingScheduler(registry)
        await scheduler.start(StartupConfiguration(ping_interval_millis=500))
        # ... later ...
        await scheduler.stop()
    """

    def __init__(
        self,
        registry: WatcherRegistry,
        clock: Callable[[], float] = now_millis,
    ):
        self._registry = registry
        self._clock = clock
        self._config = StartupConfiguration()

        self._running = False
        self._loop_task: Optional[asyncio.Task] = None

        # diagnostics
        self.pass_count = 0
        self.requests_sent = 0
        self.last_pass_at: Optional[datetime] = None

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def start(self, config: Optional[StartupConfiguration] = None) -> bool:
        """
        Start the polling loop.

        Returns False, without touching the running loop, if the
        scheduler is already running.
        """
        if self._running:
            logger.warning("Scheduler is already running")
            return False

        self._config = config or StartupConfiguration()
        self._running = True
        self._loop_task = asyncio.create_task(self._main_loop(), name="artco-scheduler")
        logger.info(
            f"✓ Scheduler started (interval="
            f"{TimeHelper.millis_to_human_readable(self._config.ping_interval_millis)})"
        )
        return True

    async def stop(self) -> None:
        """Stop the polling loop; requests already sent are not recalled."""
        self._running = False
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        logger.info("✓ Scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def config(self) -> StartupConfiguration:
        return self._config

    # ------------------------------------------------------------------
    # MAIN LOOP
    # ------------------------------------------------------------------

    async def _main_loop(self) -> None:
        delay = self._config.timeout_until_first_ping
        if delay > 0:
            logger.info(
                f"[Scheduler] Waiting {TimeHelper.millis_to_human_readable(delay)} "
                f"until the first ping request"
            )
            await asyncio.sleep(delay / 1000.0)

        loop = asyncio.get_running_loop()
        interval = self._config.ping_interval_millis / 1000.0
        next_pass = loop.time()

        logger.info("[Scheduler] Main loop started")
        while self._running:
            try:
                self.run_pass()
            except Exception as e:
                logger.error(f"[Scheduler] Unhandled error in polling pass: {e}")

            # fixed cadence; a pass that overruns does not trigger a burst
            next_pass = max(next_pass + interval, loop.time())
            await asyncio.sleep(next_pass - loop.time())

        logger.info("[Scheduler] Main loop exited")

    # ------------------------------------------------------------------
    # POLLING PASS
    # ------------------------------------------------------------------

    def run_pass(self) -> int:
        """
        Run one polling pass over every registered watcher.

        Returns the number of PingRequests sent.
        """
        now = self._clock()
        sent = 0

        for watcher in self._registry.values():
            if not watcher.is_ready:
                logger.debug(f"[Scheduler] Service {watcher.identity} is not ready yet")
                continue

            if not watcher.worker.is_alive:
                logger.debug(f"[Scheduler] Service {watcher.identity} has no live worker")
                continue

            if not watcher.is_due(now):
                logger.debug(
                    f"[Scheduler] Service {watcher.identity} polled recently, skipping"
                )
                continue

            try:
                watcher.request_ping(now)
                sent += 1
            except Exception as e:
                logger.error(
                    f"[Scheduler] Failed to send ping request to {watcher.identity}: {e}"
                )

        self.pass_count += 1
        self.requests_sent += sent
        self.last_pass_at = datetime.now(timezone.utc)
        return sent

    # ------------------------------------------------------------------
    # DIAGNOSTICS
    # ------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        return {
            "running": self._running,
            "ping_interval_millis": self._config.ping_interval_millis,
            "timeout_until_first_ping": self._config.timeout_until_first_ping,
            "pass_count": self.pass_count,
            "requests_sent": self.requests_sent,
            "last_pass_at": self.last_pass_at.isoformat() if self.last_pass_at else None,
        }

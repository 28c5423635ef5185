"""
============================================================================
ARTCO - MAIN APPLICATION
============================================================================
Runs the monitoring engine as a standalone process.

Startup Order
-------------
1.  Load settings & configure logging
2.  Create the engine and register watchers from MonitoringSettings
        • "Ping"               → EchoProber   (AsyncWorker)
        • http_targets entries → HttpProber   (ThreadWorker)
        • tcp_targets entries  → TcpProber    (AsyncWorker)
3.  Start the status server (if enabled)
4.  Start the engine; it polls until shutdown

Shutdown Order (reverse)
-------------------------
On KeyboardInterrupt or SIGTERM:
    stop engine (terminates every worker) → stop status server → exit

Environment variables are documented in artco/config/settings.py.
============================================================================
"""

import asyncio
import signal
import sys
from typing import Optional

from artco.config.settings import StartupConfiguration, get_settings
from artco.exceptions import ArtcoException
from artco.monitoring.engine import Artco, EngineEvents
from artco.monitoring.protocol import PingResult, ProberMessage, ReadySignal
from artco.monitoring.status_server import StatusServer
from artco.monitoring.watcher import WatcherOptions
from artco.monitoring.worker import AsyncWorker, ThreadWorker
from artco.probers import EchoProber, HttpProber, TcpProber
from artco.utils.logger import get_logger, setup_logging


logger = get_logger("Main")


# ============================================================================
# ENGINE-WIDE CALLBACKS
# ============================================================================

def _log_ping(identity: str, result: PingResult) -> None:
    logger.debug(
        f"Ping {identity}: available={result.service_is_available} "
        f"in {result.elapsed_time_millis:.1f}ms"
    )


def _log_warmup(identity: str, signal_: ReadySignal) -> None:
    logger.info(f"Service {identity} warmed up (ready={signal_.is_ready})")


def _log_state_change(identity: str, message: ProberMessage) -> None:
    reason = getattr(message, "reason", None)
    if reason:
        logger.warning(f"Service {identity}: {reason}")


# ============================================================================
# APPLICATION CLASS
# ============================================================================

class ArtcoApplication:
    """
    Top-level application orchestrator.

    Owns the engine and the status server, and is the single place that
    knows the startup / shutdown order.
    """

    def __init__(self):
        self.settings = get_settings()

        self.engine: Optional[Artco] = None
        self.status_server: Optional[StatusServer] = None

        self._is_running = False
        self._stop_event: Optional[asyncio.Event] = None

    # ==================================================================
    # PHASE 1: ENGINE & WATCHERS
    # ==================================================================

    def _init_engine(self) -> bool:
        """Create the engine and register every configured watcher."""
        logger.info("── Phase 1: Engine & watchers ─────────────────────")
        monitoring = self.settings.monitoring
        options = WatcherOptions(
            minimum_repoll_interval_millis=monitoring.minimum_repoll_interval_millis
        )

        self.engine = Artco(
            events=EngineEvents(
                on_ping=_log_ping,
                on_warmup=_log_warmup,
                on_state_change=_log_state_change,
            )
        )

        if monitoring.echo_enabled:
            self.engine.register("Ping", AsyncWorker(EchoProber(), name="PingWorker"), options)

        loop = asyncio.get_running_loop()
        for identity, url in monitoring.http_targets.items():
            try:
                worker = ThreadWorker(HttpProber(url), name=f"Http-{identity}", deliver_to=loop)
            except ArtcoException as e:
                logger.error(f"  ✗ Skipping HTTP watcher {identity}: {e.full_message}")
                continue
            self.engine.register(identity, worker, options)

        for identity, target in monitoring.tcp_targets.items():
            try:
                worker = AsyncWorker(TcpProber(target), name=f"Tcp-{identity}")
            except ArtcoException as e:
                logger.error(f"  ✗ Skipping TCP watcher {identity}: {e.full_message}")
                continue
            self.engine.register(identity, worker, options)

        if not self.engine.list_watchers():
            logger.error("  ✗ No service watchers configured")
            return False

        logger.info(f"  ✓ {len(self.engine.list_watchers())} service watcher(s) registered")
        return True

    # ==================================================================
    # PHASE 2: STATUS SERVER
    # ==================================================================

    def _init_status_server(self) -> None:
        logger.info("── Phase 2: Status server ─────────────────────────")
        if not self.settings.status.enabled:
            logger.info("  Status server disabled")
            return
        self.status_server = StatusServer(self.engine, self.settings.status)
        logger.info("  ✓ StatusServer created")

    # ==================================================================
    # FULL STARTUP SEQUENCE
    # ==================================================================

    async def startup(self) -> bool:
        """
        Execute the complete startup sequence.
        Returns False (and logs errors) if a critical phase fails.
        """
        logger.info("=" * 74)
        logger.info(f"  STARTING {self.settings.app_name} v{self.settings.app_version} …")
        logger.info("=" * 74)

        if not self._init_engine():
            return False

        self._init_status_server()

        if self.status_server:
            try:
                await self.status_server.start()
            except OSError as e:
                logger.warning(f"  ⚠ Status server failed to start — continuing without it: {e}")
                self.status_server = None

        await self.engine.start(StartupConfiguration.from_settings(self.settings.monitoring))

        self._is_running = True
        self._stop_event = asyncio.Event()

        logger.info("=" * 74)
        logger.info("  ✓ ALL SYSTEMS OPERATIONAL")
        logger.info("=" * 74)
        return True

    # ==================================================================
    # SHUTDOWN SEQUENCE
    # ==================================================================

    async def shutdown(self) -> None:
        """
        Graceful shutdown in reverse order.
        Each step is wrapped in try/except so one failure does not keep
        the other subsystems from cleaning up.
        """
        if not self._is_running:
            return
        self._is_running = False

        logger.info("=" * 74)
        logger.info("  SHUTTING DOWN …")
        logger.info("=" * 74)

        if self.engine:
            try:
                await self.engine.stop()
            except Exception as e:
                logger.error(f"  ✗ Engine stop error: {e}")

        if self.status_server:
            try:
                await self.status_server.stop()
            except Exception as e:
                logger.error(f"  ✗ StatusServer stop error: {e}")

        if self._stop_event:
            self._stop_event.set()

        logger.info("  ✓ SHUTDOWN COMPLETE")

    # ==================================================================
    # RUN
    # ==================================================================

    async def run(self) -> None:
        """Block until shutdown() is called."""
        if self._stop_event:
            await self._stop_event.wait()

    def request_shutdown(self) -> None:
        asyncio.ensure_future(self.shutdown())


# ============================================================================
# SIGNAL HANDLER SETUP
# ============================================================================

def _install_signal_handlers(app: ArtcoApplication) -> None:
    """Install SIGTERM / SIGINT handlers for a graceful shutdown."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, app.request_shutdown)
        except (NotImplementedError, OSError):
            # Not supported on Windows; KeyboardInterrupt still works
            pass


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

async def main() -> None:
    """Async main — creates the app, starts it, and runs until shutdown."""
    setup_logging()

    app = ArtcoApplication()
    _install_signal_handlers(app)

    if not await app.startup():
        logger.error("  ✗ Startup failed — exiting")
        sys.exit(1)

    try:
        await app.run()
    finally:
        await app.shutdown()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()

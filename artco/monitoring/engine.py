"""
============================================================================
ARTCO - MONITORING ENGINE
============================================================================
The engine owns every registered service watcher, listens to their
workers, and fans out callbacks when pings arrive or state changes.

Architecture
------------
Artco                     ← engine, owns registry + scheduler
├── register()            ← wraps a worker in an ObservedWatcher, subscribes
├── PollingScheduler      ← sends PingRequests to ready watchers
├── _dispatch()           ← one call per inbound message, per watcher
│   ├── ObservedWatcher.compute()
│   ├── on_ping / on_warmup      (watcher first, then engine-wide)
│   └── on_state_change          (only when the state label changed)
└── stop()                ← cancels the scheduler, terminates every worker

Dispatch runs on whatever thread the worker delivers on. Messages of one
worker are delivered one at a time and in order; messages of different
workers may interleave, so the registry is lock-guarded and each watcher
is only ever written by its own worker's dispatch path.

Callbacks are plain callables, invoked synchronously in a fixed order
before the next message of the same watcher is processed. A callback
that raises is logged and the remaining callbacks still run.
============================================================================
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from artco.config.settings import StartupConfiguration, get_settings
from artco.exceptions.monitoring import ProtocolError, RegistrationError
from artco.monitoring.protocol import PingResult, ReadySignal, decode_message
from artco.monitoring.registry import WatcherRegistry
from artco.monitoring.scheduler import PollingScheduler
from artco.monitoring.watcher import (
    ObservedWatcher,
    PingCallback,
    StateChangeCallback,
    WarmupCallback,
    WatcherOptions,
    WatcherSnapshot,
)
from artco.monitoring.worker import Worker
from artco.utils.clock import now_millis
from artco.utils.logger import get_logger


logger = get_logger("Artco")


@dataclass
class EngineEvents:
    """
    Engine-wide callbacks, fired for every watcher after the
    watcher's own callbacks.
    """
    on_ping: Optional[PingCallback] = None
    on_warmup: Optional[WarmupCallback] = None
    on_state_change: Optional[StateChangeCallback] = None


class Artco:
    """
    Health-monitoring engine.

    Lifecycle
    ---------
    1.  ``engine.register(identity, worker, options)`` for every service
    2.  ``await engine.start(config)``   — starts the polling scheduler
    3.  ``await engine.stop()``          — stops polling, terminates workers

    Parameters
    ----------
    events : EngineEvents | None
        Engine-wide callbacks; replace later with ``set_events``.
    clock : callable
        Returns the current time in milliseconds.
    """

    def __init__(
        self,
        events: Optional[EngineEvents] = None,
        clock: Callable[[], float] = now_millis,
    ):
        self._events = events or EngineEvents()
        self._clock = clock
        self._registry = WatcherRegistry()
        self._scheduler = PollingScheduler(self._registry, clock=clock)

    # ------------------------------------------------------------------
    # EVENTS
    # ------------------------------------------------------------------

    @property
    def events(self) -> EngineEvents:
        return self._events

    def set_events(self, events: EngineEvents) -> None:
        """Replace every engine-wide callback at once."""
        self._events = events

    # ------------------------------------------------------------------
    # REGISTRATION
    # ------------------------------------------------------------------

    def register(
        self,
        identity: str,
        worker: Worker,
        options: Optional[WatcherOptions] = None,
    ) -> None:
        """
        Register a service watcher and start listening to its worker.

        Registering an identity that is already in use replaces the
        existing watcher and terminates its worker; messages still
        arriving from the old worker are dropped. Passing the same worker
        again only swaps the options; the observed state is kept.

        Raises
        ------
        RegistrationError
            If *identity* is empty or not a string.
        """
        if not isinstance(identity, str) or not identity.strip():
            raise RegistrationError(
                "Service identity must be a non-empty string", identity=repr(identity)
            )

        watcher = ObservedWatcher(identity, worker, options, clock=self._clock)
        current = self._registry.get(identity)
        if current is not None and current.worker is worker:
            watcher.inherit_state(current)

        previous = self._registry.put(watcher)

        if previous is not None:
            logger.warning(f"Service '{identity}' already registered, replacing it")
            if previous.worker is not worker:
                self._dispose(previous)

        worker.on_message(lambda message: self._dispatch(watcher, message))
        worker.start()
        logger.info(f"Registered service watcher '{identity}' ({worker!r})")

    def unregister(self, identity: str) -> bool:
        """Remove a watcher and terminate its worker. Returns True if found."""
        watcher = self._registry.pop(identity)
        if watcher is None:
            return False
        self._dispose(watcher)
        logger.info(f"Unregistered service watcher '{identity}'")
        return True

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def start(self, config: Optional[StartupConfiguration] = None) -> None:
        """
        Start polling every registered watcher.

        Calling ``start`` while the engine is running is a no-op.
        """
        if self._scheduler.is_running:
            logger.warning("Artco is already running, ignoring start()")
            return

        config = config or StartupConfiguration.from_settings(get_settings().monitoring)

        # AsyncWorkers registered before the loop was running start here
        for watcher in self._registry.values():
            watcher.worker.start()

        await self._scheduler.start(config)
        logger.info(f"✓ Artco started with {len(self._registry)} service watcher(s)")

    async def stop(self) -> None:
        """
        Stop polling and terminate every worker.

        The registry is kept; responses that arrive after this point are
        dropped. Worker termination failures are logged and do not stop
        the remaining workers from being terminated.
        """
        await self._scheduler.stop()

        watchers = self._registry.values()
        for watcher in watchers:
            self._dispose(watcher)

        # thread-backed workers exit off the loop, all at once
        results = await asyncio.gather(
            *(watcher.worker.wait_terminated() for watcher in watchers),
            return_exceptions=True,
        )
        for watcher, result in zip(watchers, results):
            if isinstance(result, Exception):
                logger.error(f"Worker of service {watcher.identity} did not shut down: {result}")

        logger.info("✓ Artco stopped")

    @property
    def is_running(self) -> bool:
        return self._scheduler.is_running

    @property
    def scheduler(self) -> PollingScheduler:
        return self._scheduler

    # ------------------------------------------------------------------
    # READ ACCESS
    # ------------------------------------------------------------------

    def list_watchers(self) -> List[WatcherSnapshot]:
        return [watcher.snapshot() for watcher in self._registry.values()]

    def get_watcher(self, identity: str) -> Optional[WatcherSnapshot]:
        watcher = self._registry.get(identity)
        return watcher.snapshot() if watcher is not None else None

    def get_stats(self) -> Dict[str, Any]:
        snapshots = self.list_watchers()
        return {
            "running": self.is_running,
            "watchers": len(snapshots),
            "ready": sum(1 for s in snapshots if s.is_ready),
            "available": sum(1 for s in snapshots if s.is_available),
            "scheduler": self._scheduler.get_stats(),
        }

    # ------------------------------------------------------------------
    # DISPATCH
    # ------------------------------------------------------------------

    def _dispatch(self, watcher: ObservedWatcher, raw: Any) -> None:
        """Handle one message delivered by *watcher*'s worker."""
        identity = watcher.identity

        if not watcher.worker.is_alive or not self._registry.is_current(watcher):
            logger.debug(f"Dropping late message from retired worker of '{identity}'")
            return

        try:
            message = decode_message(raw)
        except ProtocolError as e:
            logger.warning(f"Service {identity} sent a malformed message: {e.log_format()}")
            return

        if message is None:
            logger.debug(f"Service {identity} sent an unrecognized message, ignoring")
            return

        logger.debug(f"Service {identity} sent a {message.event.value} message")

        events = self._events
        options = watcher.options
        previous = watcher.state

        transition = watcher.compute(message)

        if isinstance(message, PingResult):
            self._invoke("on_ping", options.on_ping, identity, message)
            self._invoke("on_ping", events.on_ping, identity, message)
        elif isinstance(message, ReadySignal):
            self._invoke("on_warmup", options.on_warmup, identity, message)
            self._invoke("on_warmup", events.on_warmup, identity, message)

        if watcher.state != previous:
            logger.info(
                f"Service {identity} changed state: "
                f"{transition.previous.value} → {transition.current.value}"
            )
            self._invoke("on_state_change", options.on_state_change, identity, message)
            self._invoke("on_state_change", events.on_state_change, identity, message)

    @staticmethod
    def _invoke(name: str, callback: Optional[Callable], identity: str, message: Any) -> None:
        if callback is None:
            return
        try:
            callback(identity, message)
        except Exception as e:
            logger.error(f"{name} callback for service {identity} raised: {e}")

    def _dispose(self, watcher: ObservedWatcher) -> None:
        try:
            watcher.worker.terminate()
        except Exception as e:
            logger.error(f"Failed to terminate worker of service {watcher.identity}: {e}")
        watcher.worker.on_message(None)

"""
Artco — service health-monitoring engine.

Register one worker per service, start the engine, and receive
availability updates through callbacks:

    from artco import Artco, AsyncWorker, EngineEvents
    from artco.probers import HttpProber

    engine = Artco(EngineEvents(on_state_change=print))
    engine.register("api", AsyncWorker(HttpProber("https://example.com")))
    await engine.start()
"""

from artco.config.settings import StartupConfiguration
from artco.monitoring import (
    Artco,
    AsyncWorker,
    AvailabilityState,
    EngineEvents,
    HttpPingResult,
    ObservedWatcher,
    PingRequest,
    PingResult,
    Prober,
    ReadySignal,
    StatusServer,
    ThreadWorker,
    WatcherOptions,
    WatcherSnapshot,
    Worker,
)

__version__ = "1.0.0"

__all__ = [
    "Artco",
    "EngineEvents",
    "StartupConfiguration",
    "WatcherOptions",
    "WatcherSnapshot",
    "ObservedWatcher",
    "AvailabilityState",
    "PingRequest",
    "PingResult",
    "HttpPingResult",
    "ReadySignal",
    "Worker",
    "AsyncWorker",
    "ThreadWorker",
    "Prober",
    "StatusServer",
    "__version__",
]

"""
============================================================================
ARTCO - MONITORING PACKAGE
============================================================================
The monitoring engine and everything it is built from:
    • Artco              — the engine: registration, dispatch, lifecycle
    • PollingScheduler   — sends ping requests on a fixed interval
    • ObservedWatcher    — per-service availability state machine
    • WatcherRegistry    — identity → watcher, lock-guarded
    • AsyncWorker / ThreadWorker — isolated execution units for probers
    • protocol           — PingRequest / PingResult / ReadySignal
    • StatusServer       — aiohttp view over the latest snapshots

monitoring/
├── __init__.py          ← this file
├── protocol.py          ← probe protocol messages
├── worker.py            ← Worker capability, Prober interface
├── watcher.py           ← ObservedWatcher + AvailabilityState
├── registry.py          ← WatcherRegistry
├── scheduler.py         ← PollingScheduler
├── engine.py            ← Artco + EngineEvents
└── status_server.py     ← StatusServer
============================================================================
"""

from artco.monitoring.protocol import (
    PingRequest,
    PingResult,
    HttpPingResult,
    ReadySignal,
    decode_message,
)
from artco.monitoring.worker import Worker, AsyncWorker, ThreadWorker, Prober
from artco.monitoring.watcher import (
    AvailabilityState,
    ObservedWatcher,
    StateTransition,
    WatcherOptions,
    WatcherSnapshot,
)
from artco.monitoring.registry import WatcherRegistry
from artco.monitoring.scheduler import PollingScheduler
from artco.monitoring.engine import Artco, EngineEvents
from artco.monitoring.status_server import StatusServer

__all__ = [
    # Protocol
    "PingRequest",
    "PingResult",
    "HttpPingResult",
    "ReadySignal",
    "decode_message",

    # Workers
    "Worker",
    "AsyncWorker",
    "ThreadWorker",
    "Prober",

    # Watchers
    "AvailabilityState",
    "ObservedWatcher",
    "StateTransition",
    "WatcherOptions",
    "WatcherSnapshot",
    "WatcherRegistry",

    # Engine
    "PollingScheduler",
    "Artco",
    "EngineEvents",
    "StatusServer",
]

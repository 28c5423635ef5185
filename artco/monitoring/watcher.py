"""
============================================================================
ARTCO - OBSERVED WATCHER
============================================================================
Wraps one registered service and turns the protocol messages coming out of
its worker into availability state.

State machine
-------------
    ReadySignal(is_ready=True)    → Transitional
    ReadySignal(is_ready=False)   → Unavailable
    PingResult(available=True)    → Available
    PingResult(available=False)   → Unavailable

The state label always follows the raw ``service_is_available`` of the
result, while the exposed ``is_available`` flag goes through the optional
availability evaluator, so the two may disagree.

A watcher is mutated only by the dispatch path of its own worker; the
scheduler reads it and records when it last sent a request.
============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from artco.monitoring.protocol import PingRequest, PingResult, ProberMessage, ReadySignal
from artco.monitoring.worker import Worker
from artco.utils.clock import now_millis
from artco.utils.helpers import TimeHelper
from artco.utils.logger import get_logger


logger = get_logger("Watcher")


class AvailabilityState(str, Enum):
    """Availability state of an observed watcher."""
    UNAVAILABLE = "Unavailable"
    AVAILABLE = "Available"
    TRANSITIONAL = "Transitional"


AvailabilityEvaluator = Callable[[PingResult], bool]
PingCallback = Callable[[str, PingResult], None]
WarmupCallback = Callable[[str, ReadySignal], None]
StateChangeCallback = Callable[[str, ProberMessage], None]


@dataclass
class WatcherOptions:
    """
    Per-watcher configuration passed to ``Artco.register``.

    Attributes
    ----------
    evaluate_availability : callable | None
        Maps a PingResult to the exposed ``is_available`` flag.
        Defaults to the raw ``service_is_available``.
    on_ping, on_warmup, on_state_change : callable | None
        Per-watcher callbacks, fired before the engine-wide ones.
    minimum_repoll_interval_millis : float | None
        The scheduler will not ping this watcher again until this many
        milliseconds have passed since its last request or result.
    """
    evaluate_availability: Optional[AvailabilityEvaluator] = None
    on_ping: Optional[PingCallback] = None
    on_warmup: Optional[WarmupCallback] = None
    on_state_change: Optional[StateChangeCallback] = None
    minimum_repoll_interval_millis: Optional[float] = None


@dataclass(frozen=True)
class StateTransition:
    previous: AvailabilityState
    current: AvailabilityState


@dataclass(frozen=True)
class WatcherSnapshot:
    """Read-only view of a watcher at one point in time."""
    identity: str
    state: AvailabilityState
    is_available: bool
    is_ready: bool
    last_ping_timestamp_millis: float
    last_elapsed_time_millis: float
    last_reason: Optional[str]
    pings_received: int
    worker_alive: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "state": self.state.value,
            "isAvailable": self.is_available,
            "isReady": self.is_ready,
            "lastPingTimestampMillis": self.last_ping_timestamp_millis,
            "lastPingAt": TimeHelper.millis_to_iso(self.last_ping_timestamp_millis),
            "lastElapsedTimeMillis": self.last_elapsed_time_millis,
            "lastReason": self.last_reason,
            "pingsReceived": self.pings_received,
            "workerAlive": self.worker_alive,
        }


class ObservedWatcher:
    """
    One registered service and its observed state.

    Parameters
    ----------
    identity : str
        Registry key of the service.
    worker : Worker
        The worker hosting the service's prober; owned by the watcher.
    options : WatcherOptions | None
        Per-watcher configuration.
    clock : callable
        Returns the current time in milliseconds.
    """

    def __init__(
        self,
        identity: str,
        worker: Worker,
        options: Optional[WatcherOptions] = None,
        clock: Callable[[], float] = now_millis,
    ):
        self.identity = identity
        self.worker = worker
        self.options = options or WatcherOptions()
        self._clock = clock

        self._state = AvailabilityState.UNAVAILABLE
        self._is_ready = False
        self._is_available = False
        self._last_ping_timestamp_millis: float = 0.0
        self._last_elapsed_time_millis: float = 0.0
        self._last_reason: Optional[str] = None
        self._pings_received = 0

        # written by the scheduler only
        self._last_request_timestamp_millis: float = 0.0

    # ------------------------------------------------------------------
    # STATE MACHINE
    # ------------------------------------------------------------------

    def compute(self, message: ProberMessage) -> Optional[StateTransition]:
        """
        Apply one protocol message.

        Returns the transition when the state label changed, else None.
        Messages of unknown type are ignored.
        """
        previous = self._state

        if isinstance(message, PingResult):
            self._apply_ping(message)
        elif isinstance(message, ReadySignal):
            self._is_ready = message.is_ready
            self._state = (
                AvailabilityState.TRANSITIONAL if message.is_ready
                else AvailabilityState.UNAVAILABLE
            )
        else:
            return None

        if self._state != previous:
            return StateTransition(previous=previous, current=self._state)
        return None

    def _apply_ping(self, result: PingResult) -> None:
        self._is_available = self._evaluate(result)
        self._state = (
            AvailabilityState.AVAILABLE if result.service_is_available
            else AvailabilityState.UNAVAILABLE
        )
        # never moves backwards, even if the wall clock does
        self._last_ping_timestamp_millis = max(self._last_ping_timestamp_millis, self._clock())
        self._last_elapsed_time_millis = result.elapsed_time_millis
        self._last_reason = result.reason
        self._pings_received += 1

    def _evaluate(self, result: PingResult) -> bool:
        evaluator = self.options.evaluate_availability
        if evaluator is None:
            return result.service_is_available
        try:
            return bool(evaluator(result))
        except Exception as e:
            logger.error(
                f"[{self.identity}] Availability evaluator raised, using raw result: {e}"
            )
            return result.service_is_available

    def inherit_state(self, previous: "ObservedWatcher") -> None:
        """
        Take over the observed state of *previous*.

        Used when the same worker is registered again: its one-time
        ReadySignal went to *previous* and will not be sent twice.
        """
        self._state = previous._state
        self._is_ready = previous._is_ready
        self._is_available = previous._is_available
        self._last_ping_timestamp_millis = previous._last_ping_timestamp_millis
        self._last_elapsed_time_millis = previous._last_elapsed_time_millis
        self._last_reason = previous._last_reason
        self._pings_received = previous._pings_received
        self._last_request_timestamp_millis = previous._last_request_timestamp_millis

    # ------------------------------------------------------------------
    # SCHEDULING
    # ------------------------------------------------------------------

    def is_due(self, now: float) -> bool:
        """True unless the minimum repoll interval has not elapsed yet."""
        interval = self.options.minimum_repoll_interval_millis
        if not interval:
            return True
        last = max(self._last_ping_timestamp_millis, self._last_request_timestamp_millis)
        return now - last >= interval

    def request_ping(self, now: float) -> None:
        """Send one PingRequest to the worker and remember when."""
        self.worker.send(PingRequest(target_identity=self.identity))
        self._last_request_timestamp_millis = now

    # ------------------------------------------------------------------
    # READ ACCESS
    # ------------------------------------------------------------------

    @property
    def state(self) -> AvailabilityState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._is_ready

    @property
    def is_available(self) -> bool:
        return self._is_available

    @property
    def last_ping_timestamp_millis(self) -> float:
        return self._last_ping_timestamp_millis

    @property
    def last_elapsed_time_millis(self) -> float:
        return self._last_elapsed_time_millis

    def snapshot(self) -> WatcherSnapshot:
        return WatcherSnapshot(
            identity=self.identity,
            state=self._state,
            is_available=self._is_available,
            is_ready=self._is_ready,
            last_ping_timestamp_millis=self._last_ping_timestamp_millis,
            last_elapsed_time_millis=self._last_elapsed_time_millis,
            last_reason=self._last_reason,
            pings_received=self._pings_received,
            worker_alive=self.worker.is_alive,
        )

    def __repr__(self) -> str:
        return (
            f"ObservedWatcher(identity={self.identity!r}, state={self._state.value}, "
            f"ready={self._is_ready}, available={self._is_available})"
        )

"""
============================================================================
ARTCO - PROBE PROTOCOL
============================================================================
The messages exchanged between the engine and an isolated prober.

    engine → worker     PingRequest   {event: "ping", targetIdentity}
    worker → engine     ReadySignal   {event: "warmup", isReady}
    worker → engine     PingResult    {event: "ping", serviceIsAvailable,
                                       elapsedTimeMillis, reason?}

A prober sends one ReadySignal before it may be polled, then exactly one
PingResult per PingRequest it receives. Messages are immutable values.

``decode_message`` accepts either a typed message or its wire dict form so
a worker may use any transport (thread queue, process pipe, JSON).
============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from artco.config.constants import ProtocolEvent
from artco.exceptions.monitoring import ProtocolError


# ============================================================================
# MESSAGES
# ============================================================================

@dataclass(frozen=True)
class PingRequest:
    """Sent by the scheduler to ask a prober for one check."""
    target_identity: str
    event: ProtocolEvent = field(default=ProtocolEvent.PING, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.event.value, "targetIdentity": self.target_identity}


@dataclass(frozen=True)
class PingResult:
    """
    Outcome of one probe cycle.

    ``elapsed_time_millis`` is taken as given; ``reason`` carries a
    human-readable diagnostic, mostly on failure.
    """
    service_is_available: bool
    elapsed_time_millis: float
    reason: Optional[str] = None
    event: ProtocolEvent = field(default=ProtocolEvent.PING, init=False)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "event": self.event.value,
            "serviceIsAvailable": self.service_is_available,
            "elapsedTimeMillis": self.elapsed_time_millis,
        }
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class HttpPingResult(PingResult):
    """PingResult produced by the HTTP prober, with the response status."""
    status_code: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["statusCode"] = self.status_code
        return data


@dataclass(frozen=True)
class ReadySignal:
    """Sent once by a prober to declare it can (or can no longer) be polled."""
    is_ready: bool
    event: ProtocolEvent = field(default=ProtocolEvent.WARMUP, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.event.value, "isReady": self.is_ready}


ProberMessage = Union[PingResult, ReadySignal]


# ============================================================================
# DECODING
# ============================================================================

# Field aliases accepted on the wire; the first entry is the canonical name.
_AVAILABLE_KEYS = ("serviceIsAvailable", "service_is_available")
_ELAPSED_KEYS = ("elapsedTimeMillis", "elapsedTimeInMillis", "elapsed_time_millis")
_READY_KEYS = ("isReady", "isWarm", "is_ready")


def _pick(payload: Mapping[str, Any], keys: tuple, event: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    raise ProtocolError(
        f"'{event}' message is missing required field '{keys[0]}'",
        event=event,
    )


def decode_message(raw: Any) -> Optional[ProberMessage]:
    """
    Turn an inbound message into a typed protocol message.

    Returns None for messages whose event is unknown, so newer probers
    can talk to an older engine. Raises ProtocolError when a known event
    lacks a required field.
    """
    if isinstance(raw, (PingResult, ReadySignal)):
        return raw

    if not isinstance(raw, Mapping):
        return None

    event = ProtocolEvent.from_value(raw.get("event"))
    if event is None:
        return None

    if event is ProtocolEvent.PING:
        available = _pick(raw, _AVAILABLE_KEYS, event.value)
        elapsed = _pick(raw, _ELAPSED_KEYS, event.value)
        reason = raw.get("reason")
        if "statusCode" in raw:
            return HttpPingResult(
                service_is_available=bool(available),
                elapsed_time_millis=elapsed,
                reason=reason,
                status_code=raw["statusCode"],
            )
        return PingResult(
            service_is_available=bool(available),
            elapsed_time_millis=elapsed,
            reason=reason,
        )

    return ReadySignal(is_ready=bool(_pick(raw, _READY_KEYS, event.value)))

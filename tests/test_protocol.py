import pytest

from artco.exceptions.monitoring import ProtocolError
from artco.monitoring.protocol import (
    HttpPingResult,
    PingRequest,
    PingResult,
    ReadySignal,
    decode_message,
)


def test_decode_ping_result_from_wire_dict():
    message = decode_message(
        {"event": "ping", "serviceIsAvailable": True, "elapsedTimeMillis": 42}
    )
    assert message == PingResult(service_is_available=True, elapsed_time_millis=42)


def test_decode_accepts_field_aliases():
    message = decode_message(
        {"event": "ping", "service_is_available": False, "elapsedTimeInMillis": 7, "reason": "down"}
    )
    assert message.service_is_available is False
    assert message.elapsed_time_millis == 7
    assert message.reason == "down"

    assert decode_message({"event": "warmup", "isWarm": True}) == ReadySignal(is_ready=True)


def test_decode_status_code_yields_http_result():
    message = decode_message(
        {"event": "ping", "serviceIsAvailable": True, "elapsedTimeMillis": 3, "statusCode": 204}
    )
    assert isinstance(message, HttpPingResult)
    assert message.status_code == 204


def test_decode_passes_typed_messages_through():
    signal = ReadySignal(is_ready=False)
    assert decode_message(signal) is signal


@pytest.mark.parametrize("raw", [{"event": "restart"}, {"no_event": 1}, "ping", None, 42])
def test_decode_ignores_unknown_messages(raw):
    assert decode_message(raw) is None


def test_decode_known_event_missing_field_raises():
    with pytest.raises(ProtocolError) as exc_info:
        decode_message({"event": "ping", "serviceIsAvailable": True})
    assert exc_info.value.details["event"] == "ping"
    assert "elapsedTimeMillis" in exc_info.value.message


def test_to_dict_uses_wire_field_names():
    assert PingRequest(target_identity="A").to_dict() == {"event": "ping", "targetIdentity": "A"}
    assert ReadySignal(is_ready=True).to_dict() == {"event": "warmup", "isReady": True}
    assert PingResult(False, 10.0, reason="boom").to_dict() == {
        "event": "ping",
        "serviceIsAvailable": False,
        "elapsedTimeMillis": 10.0,
        "reason": "boom",
    }
    assert HttpPingResult(True, 1.0, status_code=200).to_dict()["statusCode"] == 200


def test_messages_are_immutable():
    result = PingResult(True, 1.0)
    with pytest.raises(AttributeError):
        result.service_is_available = False

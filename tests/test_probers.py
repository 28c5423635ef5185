import asyncio
import socket

import httpx
import pytest

from artco.exceptions.base import ConfigurationError
from artco.exceptions.validation import InvalidURLError
from artco.monitoring.protocol import HttpPingResult, PingRequest
from artco.probers import EchoProber, HttpProber, TcpProber


REQUEST = PingRequest(target_identity="svc")


@pytest.mark.asyncio
async def test_echo_prober_is_always_available():
    prober = EchoProber()
    assert await prober.warmup() is True
    result = await prober.ping(REQUEST)
    assert result.service_is_available is True
    assert result.elapsed_time_millis >= 0


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

async def _http_ping(handler, **kwargs):
    prober = HttpProber("https://example.com/health", transport=httpx.MockTransport(handler), **kwargs)
    await prober.warmup()
    try:
        return await prober.ping(REQUEST)
    finally:
        await prober.close()


@pytest.mark.asyncio
async def test_http_any_response_counts_as_available():
    result = await _http_ping(lambda request: httpx.Response(503))
    assert isinstance(result, HttpPingResult)
    assert result.service_is_available is True
    assert result.status_code == 503
    assert result.reason is None


@pytest.mark.asyncio
async def test_http_expected_status_codes():
    result = await _http_ping(lambda request: httpx.Response(500), expected_status_codes={200, 204})
    assert result.service_is_available is False
    assert result.status_code == 500
    assert result.reason == "Unexpected status 500 (expected [200, 204])"


@pytest.mark.asyncio
async def test_http_sends_user_agent_and_method():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["agent"] = request.headers["User-Agent"]
        return httpx.Response(200)

    await _http_ping(handler, method="head", headers={"User-Agent": "probe/1"})
    assert seen == {"method": "HEAD", "agent": "probe/1"}


@pytest.mark.asyncio
async def test_http_transport_error_becomes_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = await _http_ping(handler)
    assert result.service_is_available is False
    assert result.reason == "Request thrown an error: connection refused"


@pytest.mark.asyncio
async def test_http_timeout_is_reported():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200)

    result = await _http_ping(handler, request_timeout_millis=50)
    assert result.service_is_available is False
    assert result.reason == "Request timed out after 50 milliseconds"
    assert result.elapsed_time_millis >= 40


@pytest.mark.parametrize("url", ["", "ftp://example.com", "not a url", "https://"])
def test_http_rejects_invalid_url(url):
    with pytest.raises(InvalidURLError):
        HttpProber(url)


# ---------------------------------------------------------------------------
# TCP
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_tcp_prober_connects_to_listening_port():
    server = await asyncio.start_server(lambda reader, writer: writer.close(), "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        result = await TcpProber(f"tcp://127.0.0.1:{port}", timeout_millis=1000).ping(REQUEST)
    finally:
        server.close()
        await server.wait_closed()

    assert result.service_is_available is True


@pytest.mark.asyncio
async def test_tcp_prober_reports_refused_connection():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    result = await TcpProber(f"127.0.0.1:{port}", timeout_millis=1000).ping(REQUEST)
    assert result.service_is_available is False
    assert result.reason.startswith("TCP connection refused or failed")


def test_tcp_target_parsing():
    prober = TcpProber("db.internal")
    assert (prober.host, prober.port) == ("db.internal", 80)

    with pytest.raises(InvalidURLError):
        TcpProber("db.internal:abc")


def test_http_rejects_unsupported_method():
    with pytest.raises(ConfigurationError) as exc_info:
        HttpProber("https://example.com", method="DELETE")
    assert exc_info.value.details["config_key"] == "method"

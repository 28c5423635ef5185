import asyncio
import threading
import time

import pytest

from artco.exceptions.monitoring import WorkerError, WorkerTerminatedError
from artco.monitoring.protocol import PingRequest, PingResult, ReadySignal
from artco.monitoring.worker import AsyncWorker, Prober, ThreadWorker
from artco.probers import EchoProber
from tests.conftest import FakeWorker, wait_until


class BrokenProber(Prober):
    async def ping(self, request):
        raise RuntimeError("probe exploded")


class ColdProber(Prober):
    async def warmup(self):
        raise ConnectionError("cannot reach dependency")

    async def ping(self, request):
        return PingResult(True, 0.0)


class BlockingProber(Prober):
    """Blocks its own thread inside ping, like a synchronous client would."""

    def __init__(self, seconds):
        self.seconds = seconds
        self.entered = threading.Event()

    async def ping(self, request):
        self.entered.set()
        time.sleep(self.seconds)
        return PingResult(True, self.seconds * 1000)


class SlowProber(Prober):
    def __init__(self):
        self.closed = False

    async def ping(self, request):
        await asyncio.sleep(10)
        return PingResult(True, 0.0)

    async def close(self):
        self.closed = True


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------

def test_messages_are_buffered_until_handler_attached():
    worker = FakeWorker()
    worker.emit(ReadySignal(is_ready=True))
    worker.emit(PingResult(True, 1.0))

    received = []
    worker.on_message(received.append)
    assert received == [ReadySignal(is_ready=True), PingResult(True, 1.0)]

    worker.on_message(None)
    worker.emit(PingResult(False, 2.0))
    assert len(received) == 2

    worker.on_message(received.append)
    assert received[-1] == PingResult(False, 2.0)


def test_nothing_is_delivered_after_terminate():
    worker = FakeWorker()
    received = []
    worker.on_message(received.append)
    worker.terminate()
    worker.emit(PingResult(True, 1.0))
    assert received == []


def test_failing_handler_does_not_break_delivery():
    worker = FakeWorker()
    received = []

    def handler(message):
        received.append(message)
        raise ValueError("handler failure")

    worker.on_message(handler)
    worker.emit(PingResult(True, 1.0))
    worker.emit(PingResult(True, 2.0))
    assert len(received) == 2


# ---------------------------------------------------------------------------
# AsyncWorker
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_async_worker_reports_ready_then_answers_pings():
    worker = AsyncWorker(EchoProber(), name="echo")
    received = []
    worker.on_message(received.append)

    await wait_until(lambda: len(received) == 1)
    assert received[0] == ReadySignal(is_ready=True)

    worker.send(PingRequest(target_identity="echo"))
    await wait_until(lambda: len(received) == 2)
    assert isinstance(received[1], PingResult)
    assert received[1].service_is_available is True

    worker.terminate()
    assert worker.is_alive is False
    with pytest.raises(WorkerTerminatedError):
        worker.send(PingRequest(target_identity="echo"))


@pytest.mark.asyncio
async def test_prober_exception_becomes_unavailable_result():
    worker = AsyncWorker(BrokenProber())
    received = []
    worker.on_message(received.append)

    worker.send(PingRequest(target_identity="broken"))
    await wait_until(lambda: len(received) == 2)

    result = received[1]
    assert result.service_is_available is False
    assert result.reason == "Prober raised an error: probe exploded"
    worker.terminate()


@pytest.mark.asyncio
async def test_failed_warmup_reports_not_ready():
    worker = AsyncWorker(ColdProber())
    received = []
    worker.on_message(received.append)

    await wait_until(lambda: len(received) == 1)
    assert received[0] == ReadySignal(is_ready=False)
    worker.terminate()


@pytest.mark.asyncio
async def test_terminate_cancels_in_flight_pings_and_closes_prober():
    prober = SlowProber()
    worker = AsyncWorker(prober)
    received = []
    worker.on_message(received.append)

    await wait_until(lambda: len(received) == 1)
    worker.send(PingRequest(target_identity="slow"))
    await asyncio.sleep(0.01)

    worker.terminate()
    await wait_until(lambda: prober.closed)
    assert len(received) == 1


def test_async_worker_without_running_loop_is_not_started():
    worker = AsyncWorker(EchoProber())
    with pytest.raises(WorkerError):
        worker.send(PingRequest(target_identity="x"))
    worker.terminate()
    assert worker.is_alive is False


# ---------------------------------------------------------------------------
# ThreadWorker
# ---------------------------------------------------------------------------

def test_thread_worker_runs_prober_in_its_own_thread():
    answered = threading.Event()
    received = []

    def handler(message):
        received.append((message, threading.current_thread().name))
        if isinstance(message, PingResult):
            answered.set()

    worker = ThreadWorker(EchoProber(), name="echo", join_timeout=2.0)
    worker.on_message(handler)
    worker.send(PingRequest(target_identity="echo"))

    assert answered.wait(2.0)
    worker.terminate()

    assert received[0][0] == ReadySignal(is_ready=True)
    assert received[-1][1] == "artco-worker-echo"
    assert worker.join()
    with pytest.raises(WorkerTerminatedError):
        worker.send(PingRequest(target_identity="echo"))


@pytest.mark.asyncio
async def test_thread_worker_delivers_onto_target_loop():
    loop = asyncio.get_running_loop()
    main_thread = threading.current_thread()
    delivered_on = []

    worker = ThreadWorker(EchoProber(), deliver_to=loop, join_timeout=2.0)
    worker.on_message(lambda message: delivered_on.append(threading.current_thread()))

    worker.send(PingRequest(target_identity="echo"))
    await wait_until(lambda: len(delivered_on) == 2)
    worker.terminate()

    assert all(thread is main_thread for thread in delivered_on)


@pytest.mark.asyncio
async def test_thread_worker_terminate_does_not_wait_for_a_blocked_prober():
    prober = BlockingProber(0.5)
    worker = ThreadWorker(prober, name="blocking", join_timeout=2.0)
    worker.on_message(lambda message: None)
    worker.send(PingRequest(target_identity="blocking"))
    await wait_until(prober.entered.is_set)

    started = time.monotonic()
    worker.terminate()
    assert time.monotonic() - started < 0.1
    assert not worker.is_alive

    await worker.wait_terminated()
    assert not worker._thread.is_alive()


def test_thread_worker_join_reports_a_thread_that_is_still_running():
    prober = BlockingProber(0.5)
    worker = ThreadWorker(prober, name="blocking", join_timeout=2.0)
    worker.on_message(lambda message: None)
    worker.send(PingRequest(target_identity="blocking"))
    assert prober.entered.wait(2.0)

    worker.terminate()

    assert worker.join(timeout=0.01) is False
    assert worker.join() is True

"""Shared fixtures: an in-process fake worker and a controllable clock."""

import asyncio
from typing import Any, Callable, List

import pytest

from artco.exceptions.monitoring import WorkerError, WorkerTerminatedError
from artco.monitoring.worker import Worker


class FakeWorker(Worker):
    """Records every message sent to it; ``emit`` plays the prober side."""

    def __init__(self, name: str = "fake"):
        super().__init__(name)
        self.sent: List[Any] = []
        self.terminate_calls = 0
        self.fail_send = False

    def send(self, message: Any) -> None:
        if self._terminated:
            raise WorkerTerminatedError(identity=self.name)
        if self.fail_send:
            raise WorkerError("send failed", identity=self.name)
        self.sent.append(message)

    def terminate(self) -> None:
        self.terminate_calls += 1
        self._terminated = True

    def emit(self, message: Any) -> None:
        self._emit(message)


class FakeClock:
    """Callable clock returning ``now`` in milliseconds."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, millis: float) -> None:
        self.now += millis


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll *predicate* on the running loop until it holds or *timeout* expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def fake_worker() -> FakeWorker:
    return FakeWorker()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

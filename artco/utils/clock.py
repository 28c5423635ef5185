"""Elapsed-time measurement used by probers and the engine."""

import time


def now_millis() -> float:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time() * 1000.0


class Clock:
    """
    Stopwatch measuring elapsed milliseconds.

    Usage
    -----
        clock = Clock()
        clock.start()
        ...
        elapsed = clock.stop()
    """

    def __init__(self):
        self._started_at: float = 0.0
        self._stopped_at: float = 0.0

    def start(self) -> None:
        self._started_at = time.perf_counter()
        self._stopped_at = self._started_at

    def stop(self) -> float:
        """Stop the clock and return the elapsed milliseconds."""
        self._stopped_at = time.perf_counter()
        return self.elapsed_millis

    @property
    def elapsed_millis(self) -> float:
        return (self._stopped_at - self._started_at) * 1000.0

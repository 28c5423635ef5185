"""
============================================================================
ARTCO - WORKERS
============================================================================
A worker is the isolated execution unit that hosts one prober. The engine
only ever talks to it through the capability below:

    send(message)          engine → prober     (non-blocking)
    on_message(handler)    prober → engine     (ordered, one at a time)
    terminate()            release the execution unit (non-blocking)
    wait_terminated()      await the unit's exit without blocking the loop

Two implementations are provided:

AsyncWorker
    Runs the prober as an asyncio task on the caller's event loop. Cheap,
    and the right choice for probers that are fully async (httpx, asyncio
    streams).

ThreadWorker
    Runs the prober in a dedicated thread with its own event loop, so a
    prober that blocks cannot stall the engine. Messages are delivered on
    the worker thread, or marshalled onto a target loop when one is given.

Outbound messages emitted before a handler is attached are buffered and
flushed in order on attach. After ``terminate()`` nothing is delivered.
============================================================================
"""

import asyncio
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Deque, Optional, Set

from artco.config.settings import get_settings
from artco.exceptions.monitoring import WorkerError, WorkerTerminatedError
from artco.monitoring.protocol import PingRequest, PingResult, ReadySignal
from artco.utils.clock import Clock
from artco.utils.helpers import StringHelper
from artco.utils.logger import get_logger


logger = get_logger("Worker")

MessageHandler = Callable[[Any], None]


# ============================================================================
# PROBER INTERFACE
# ============================================================================

class Prober(ABC):
    """
    Performs the actual service check inside a worker.

    ``warmup`` runs once when the worker starts; its return value is sent
    to the engine as the ReadySignal. ``ping`` runs once per PingRequest
    and should report failures as an unavailable PingResult rather than
    raise.
    """

    async def warmup(self) -> bool:
        return True

    @abstractmethod
    async def ping(self, request: PingRequest) -> PingResult:
        ...

    async def close(self) -> None:
        """Release prober resources; called from the worker's own loop."""


# ============================================================================
# WORKER CAPABILITY
# ============================================================================

class Worker(ABC):
    """
    Base class for every worker.

    Subclasses implement ``send`` and ``terminate`` and call ``_emit`` for
    every outbound message.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self._handler: Optional[MessageHandler] = None
        self._pending: Deque[Any] = deque()
        # Serializes delivery so one worker never delivers two messages at once
        self._delivery_lock = threading.RLock()
        self._terminated = False

    # ------------------------------------------------------------------
    # CAPABILITY
    # ------------------------------------------------------------------

    @abstractmethod
    def send(self, message: Any) -> None:
        """Hand a message to the prober without waiting for it."""

    @abstractmethod
    def terminate(self) -> None:
        """Stop the prober and release the execution unit."""

    def start(self) -> None:
        """Start the execution unit if it is not running yet."""

    async def wait_terminated(self) -> None:
        """Wait, without blocking the loop, until a terminated unit has exited."""

    def on_message(self, handler: Optional[MessageHandler]) -> None:
        """
        Attach the outbound message handler, replacing any previous one.

        Passing None detaches the handler; later messages are buffered
        again until a new handler is attached.
        """
        with self._delivery_lock:
            self._handler = handler
            if handler is None:
                return
            while self._pending:
                self._deliver(handler, self._pending.popleft())

    @property
    def is_alive(self) -> bool:
        return not self._terminated

    # ------------------------------------------------------------------
    # DELIVERY
    # ------------------------------------------------------------------

    def _emit(self, message: Any) -> None:
        with self._delivery_lock:
            if self._terminated:
                logger.debug(f"[{self.name}] Dropping {type(message).__name__} after terminate")
                return
            handler = self._handler
            if handler is None:
                self._pending.append(message)
                return
            self._deliver(handler, message)

    def _deliver(self, handler: MessageHandler, message: Any) -> None:
        try:
            handler(message)
        except Exception as e:
            logger.error(f"[{self.name}] Message handler raised: {e}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, alive={self.is_alive})"


# ============================================================================
# PROBER HOST (shared by both workers)
# ============================================================================

class _ProberHostWorker(Worker):
    """
    Runs a Prober on an event loop: one ReadySignal after warmup, then one
    PingResult per request. Requests are served concurrently; each result
    is emitted as soon as its ping finishes.
    """

    def __init__(self, prober: Prober, name: Optional[str] = None):
        super().__init__(name or type(prober).__name__)
        self.prober = prober
        self._inbox: Optional[asyncio.Queue] = None
        self._main_task: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    async def _run(self) -> None:
        try:
            try:
                is_ready = await self.prober.warmup()
            except Exception as e:
                logger.error(f"[{self.name}] Warmup failed: {e}")
                is_ready = False
            self._emit(ReadySignal(is_ready=bool(is_ready)))

            while True:
                request = await self._inbox.get()
                task = asyncio.create_task(self._serve(request))
                self._in_flight.add(task)
                task.add_done_callback(self._in_flight.discard)
        finally:
            for task in list(self._in_flight):
                task.cancel()
            if self._in_flight:
                await asyncio.gather(*self._in_flight, return_exceptions=True)
            try:
                await self.prober.close()
            except Exception as e:
                logger.warning(f"[{self.name}] Prober close failed: {e}")

    async def _serve(self, request: Any) -> None:
        if not isinstance(request, PingRequest):
            logger.debug(f"[{self.name}] Ignoring unsupported request {request!r}")
            return

        clock = Clock()
        clock.start()
        try:
            result = await self.prober.ping(request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            result = PingResult(
                service_is_available=False,
                elapsed_time_millis=clock.stop(),
                reason=StringHelper.truncate(f"Prober raised an error: {e}"),
            )
        self._emit(result)

    def _cancel_all(self) -> None:
        if self._main_task is not None:
            self._main_task.cancel()


# ============================================================================
# ASYNC WORKER
# ============================================================================

class AsyncWorker(_ProberHostWorker):
    """
    Hosts a prober as an asyncio task on the running event loop.

    If no loop is running at construction time the task is started by
    ``start()``, which the engine calls from ``register`` and ``start``.
    """

    def __init__(self, prober: Prober, name: Optional[str] = None):
        super().__init__(prober, name)
        self.start()

    def start(self) -> None:
        if self._main_task is not None or self._terminated:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._inbox = asyncio.Queue()
        self._main_task = loop.create_task(self._run(), name=f"artco-worker-{self.name}")

    def send(self, message: Any) -> None:
        if self._terminated:
            raise WorkerTerminatedError(identity=self.name)
        if self._inbox is None:
            raise WorkerError(f"Worker {self.name} has not been started", identity=self.name)
        self._inbox.put_nowait(message)

    def terminate(self) -> None:
        if self._terminated:
            return
        self._terminated = True
        try:
            self._cancel_all()
        except RuntimeError:
            pass  # owning loop already closed
        logger.debug(f"[{self.name}] AsyncWorker terminated")


# ============================================================================
# THREAD WORKER
# ============================================================================

class ThreadWorker(_ProberHostWorker):
    """
    Hosts a prober in a dedicated daemon thread running its own loop.

    Parameters
    ----------
    prober : Prober
        The prober to run.
    name : str | None
        Used for logging and the thread name.
    deliver_to : asyncio.AbstractEventLoop | None
        When given, messages are handed to the handler on this loop via
        ``call_soon_threadsafe``; otherwise on the worker thread.
    join_timeout : float | None
        Seconds ``join()`` and ``wait_terminated()`` wait for the thread
        to exit. ``terminate()`` itself never waits.
    """

    def __init__(
        self,
        prober: Prober,
        name: Optional[str] = None,
        deliver_to: Optional[asyncio.AbstractEventLoop] = None,
        join_timeout: Optional[float] = None,
    ):
        super().__init__(prober, name)
        self._deliver_loop = deliver_to
        self._join_timeout = (
            join_timeout if join_timeout is not None
            else get_settings().monitoring.worker_terminate_timeout
        )
        self._loop = asyncio.new_event_loop()
        self._inbox = asyncio.Queue()
        self._thread = threading.Thread(
            target=self._thread_main,
            name=f"artco-worker-{self.name}",
            daemon=True,
        )
        self._thread.start()

    def _thread_main(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._main_task = self._loop.create_task(self._run())
            self._loop.run_until_complete(self._main_task)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"[{self.name}] Worker thread crashed: {e}")
        finally:
            self._loop.close()

    def send(self, message: Any) -> None:
        if self._terminated:
            raise WorkerTerminatedError(identity=self.name)
        try:
            self._loop.call_soon_threadsafe(self._inbox.put_nowait, message)
        except RuntimeError as e:
            raise WorkerTerminatedError(
                f"Worker {self.name} event loop is closed", identity=self.name, cause=e
            )

    def _deliver(self, handler: MessageHandler, message: Any) -> None:
        if self._deliver_loop is None:
            super()._deliver(handler, message)
            return
        try:
            self._deliver_loop.call_soon_threadsafe(super()._deliver, handler, message)
        except RuntimeError:
            logger.debug(f"[{self.name}] Delivery loop closed, dropping {type(message).__name__}")

    def terminate(self) -> None:
        """Ask the worker thread to stop; returns without waiting for it."""
        if self._terminated:
            return
        self._terminated = True
        try:
            self._loop.call_soon_threadsafe(self._cancel_all)
        except RuntimeError:
            pass  # loop already closed
        logger.debug(f"[{self.name}] ThreadWorker terminated")

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the worker thread has exited.

        Returns True if it exited within *timeout* seconds (defaults to
        ``join_timeout``). Never call this from an event loop thread;
        use ``wait_terminated`` there.
        """
        if threading.current_thread() is self._thread:
            return False
        timeout = self._join_timeout if timeout is None else timeout
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"[{self.name}] Worker thread did not exit within {timeout}s")
            return False
        return True

    async def wait_terminated(self) -> None:
        await asyncio.to_thread(self.join)

"""
Background thread running the client's private asyncio event loop.
"""

import asyncio
import concurrent.futures
import logging
import threading
import time
from typing import Any, Awaitable, Callable, Coroutine, Optional, Set, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class EventLoopThread:
    """
    Event loop that runs in a separate daemon thread.

    This is an approach to leverage asyncio behind a synchronous API: every
    piece of mutable client state is touched from this loop only, and callers
    on other threads hand work over with ``call_soon`` and ``submit``. Being a
    daemon thread it never keeps the process alive.
    """

    def __init__(self, name: str = "datalyr-events"):
        self.name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._started = threading.Event()
        self._running = False

        # Detached tasks, referenced until done
        self._tasks: Set["asyncio.Task[Any]"] = set()

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return

        self._loop = asyncio.new_event_loop()
        self._started.clear()
        self._thread = threading.Thread(target=self._run_event_loop, name=self.name, daemon=True)
        self._thread.start()
        self._started.wait()
        self._running = True

    def _run_event_loop(self) -> None:
        loop = self._loop
        assert loop is not None
        asyncio.set_event_loop(loop)
        loop.call_soon(self._started.set)

        try:
            loop.run_forever()
        finally:
            try:
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                loop.close()
                logger.debug("Event loop %s closed", self.name)

    def in_loop_thread(self) -> bool:
        return self._thread is threading.current_thread()

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """
        Schedule a plain callback on the loop from any thread.
        """
        self._require_running()
        self._loop.call_soon_threadsafe(callback, *args)  # type: ignore[union-attr]

    def submit(self, coro: Coroutine[Any, Any, T]) -> "concurrent.futures.Future[T]":
        """
        Run a coroutine on the loop from any thread.

        Returns:
            A future the calling thread can wait on or cancel
        """
        if not self._running:
            coro.close()
            self._require_running()

        return asyncio.run_coroutine_threadsafe(coro, self._loop)  # type: ignore[arg-type]

    def spawn(
        self,
        coro: Awaitable[Any],
        on_error: Callable[[BaseException], None],
    ) -> "asyncio.Task[Any]":
        """
        Start a detached task. Must be called from the loop thread.

        Errors are handed to ``on_error`` and never reach the caller.
        """
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)

        def _done(finished: "asyncio.Task[Any]") -> None:
            self._tasks.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                on_error(error)

        task.add_done_callback(_done)
        return task

    def stop(
        self,
        cleanup: Optional[Callable[[], Awaitable[Any]]] = None,
        timeout: float = 1.0,
    ) -> bool:
        """
        Cancel outstanding tasks, run ``cleanup`` and stop the loop.

        Args:
            cleanup: Coroutine function awaited on the loop before it stops
            timeout: Seconds to wait for the teardown and the thread, together

        Returns:
            Whether the thread finished within the timeout
        """
        if not self._running:
            return True

        self._running = False
        loop = self._loop
        assert loop is not None and self._thread is not None

        async def shutdown() -> None:
            current = asyncio.current_task()
            pending = [task for task in asyncio.all_tasks() if task is not current]
            if pending:
                logger.debug("Cancelling %s pending tasks", len(pending))
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

            if cleanup is not None:
                await cleanup()

        deadline = time.monotonic() + timeout
        future = asyncio.run_coroutine_threadsafe(shutdown(), loop)
        try:
            future.result(timeout)
        except concurrent.futures.TimeoutError:
            logger.debug("Event loop %s teardown timed out", self.name)
        except Exception:
            logger.debug("Event loop %s teardown failed", self.name, exc_info=True)

        loop.call_soon_threadsafe(loop.stop)
        self._thread.join(max(deadline - time.monotonic(), 0))
        return not self._thread.is_alive()

    def _require_running(self) -> None:
        if not self._running:
            raise RuntimeError(f"Event loop {self.name} is not running")

"""Run coroutines from synchronous callers on a background event loop."""

from __future__ import annotations

import asyncio
import atexit
import concurrent.futures
import threading
from typing import Any, Coroutine, Optional

from .logging_utils import get_module_logger

logger = get_module_logger("AsyncBridge")


class BackgroundLoop:
    """
    An asyncio event loop living on a daemon thread.

    Synchronous code (scripts, REPL sessions) has no running loop to host a
    capture task. Coroutines submitted here run on the background loop and
    hand back a ``concurrent.futures.Future``.

    Pending work is drained at interpreter exit, so a script that starts a
    capture and falls off the end still gets its callback.
    """

    def __init__(self) -> None:
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._lock = threading.Lock()
        self._pending: set[concurrent.futures.Future] = set()
        self._atexit_registered = False

    @property
    def running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def start(self) -> None:
        # Held until the loop is ready so concurrent callers never see a
        # live thread without a loop.
        with self._lock:
            if self.running and self._ready.is_set():
                return
            if self.thread is not None and self.thread.is_alive():
                # Still winding down after stop()
                self.thread.join(5.0)
            self._ready.clear()
            self.thread = threading.Thread(target=self._run_event_loop, name="raspicam-loop", daemon=True)
            self.thread.start()
            if not self._atexit_registered:
                atexit.register(self.drain)
                self._atexit_registered = True

            if not self._ready.wait(timeout=5.0):
                raise RuntimeError("Background event loop failed to start within 5 seconds")

            logger.debug("Background event loop running (thread %s)", self.thread.ident)

    def _run_event_loop(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self.loop = loop
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            self._ready.clear()
            if self.loop is loop:
                self.loop = None
            loop.close()
            logger.debug("Background event loop stopped")

    def submit(self, coro: Coroutine[Any, Any, Any], *, context: str = "coroutine") -> concurrent.futures.Future:
        """Schedule ``coro`` on the background loop, starting it if needed."""
        self.start()
        loop = self.loop
        if loop is None or loop.is_closed():
            coro.close()
            raise RuntimeError("Background event loop is not running")
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        self._pending.add(future)

        def _done(done: concurrent.futures.Future) -> None:
            self._pending.discard(done)
            if done.cancelled():
                return
            exc = done.exception()
            if exc is not None:
                logger.error(
                    "Unhandled exception in %s",
                    context,
                    exc_info=(type(exc), exc, exc.__traceback__),
                )

        future.add_done_callback(_done)
        return future

    def drain(self, timeout: Optional[float] = None) -> None:
        """Block until every submitted coroutine has finished, then stop."""
        pending = list(self._pending)
        if pending:
            logger.debug("Waiting for %d pending capture(s)", len(pending))
            concurrent.futures.wait(pending, timeout=timeout)
        self.stop()

    def stop(self, timeout: float = 5.0) -> None:
        """Cancel whatever is still scheduled and stop the loop."""
        with self._lock:
            loop = self.loop
            thread = self.thread
            if thread is None or not thread.is_alive() or loop is None:
                return
            self._ready.clear()
        asyncio.run_coroutine_threadsafe(self._shutdown(), loop)
        thread.join(timeout)

    async def _shutdown(self) -> None:
        tasks = [task for task in asyncio.all_tasks() if task is not asyncio.current_task()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        asyncio.get_running_loop().stop()


_background_loop = BackgroundLoop()


def get_background_loop() -> BackgroundLoop:
    return _background_loop


__all__ = ["BackgroundLoop", "get_background_loop"]

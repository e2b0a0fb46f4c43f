"""Task runners that move blocking gateway calls off the UI thread.

The core is single-threaded: every state mutation happens inside an
``on_done`` callback delivered on the UI thread. Runners only decide where
``work`` executes.

Call context:
    - ``InlineTaskRunner`` for headless scripts and unit tests.
    - ``ThreadTaskRunner`` for the Tkinter shell; ``bboard.app.main`` passes
      Tk ``after`` as the scheduler.
"""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Tuple, TypeVar

from bboard.domain.ports import TaskRunnerPort

T = TypeVar("T")
ScheduleFn = Callable[[int, Callable[[], None]], object]

log = logging.getLogger(__name__)


class InlineTaskRunner(TaskRunnerPort):
    """Run ``work`` immediately and deliver its result synchronously."""

    def submit(self, work: Callable[[], T], on_done: Callable[[T], None]) -> None:
        on_done(work())


class ThreadTaskRunner(TaskRunnerPort):
    """Execute work on a thread pool and hand results back via a UI scheduler.

    Completed futures are queued by the worker threads. ``drain`` pops them on
    the UI thread and invokes the callbacks in completion order, which may
    differ from submission order.
    """

    def __init__(self, schedule: ScheduleFn, *, max_workers: int = 4, poll_ms: int = 50) -> None:
        """Create the pool and arm the first drain tick.

        Args:
            schedule: Function compatible with Tk ``after(delay_ms, callback)``.
            max_workers: Thread-pool size for concurrent gateway calls.
            poll_ms: Interval between drains of the completion queue.
        """
        self._schedule = schedule
        self._poll_ms = max(1, int(poll_ms))
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bboard-io")
        self._done: "queue.Queue[Tuple[Future, Callable]]" = queue.Queue()
        self._closed = False
        self._schedule(self._poll_ms, self._tick)

    def submit(self, work: Callable[[], T], on_done: Callable[[T], None]) -> None:
        if self._closed:
            raise RuntimeError("ThreadTaskRunner is shut down")
        future = self._pool.submit(work)
        future.add_done_callback(lambda fut: self._done.put((fut, on_done)))

    def drain(self, limit: Optional[int] = None) -> int:
        """Deliver completed results on the calling (UI) thread.

        Returns:
            Number of callbacks invoked.

        Raises:
            Exception: Re-raises anything ``work`` raised, on the UI thread.
        """
        count = 0
        while limit is None or count < limit:
            try:
                future, on_done = self._done.get_nowait()
            except queue.Empty:
                break
            count += 1
            on_done(future.result())
        return count

    def shutdown(self) -> None:
        self._closed = True
        self._pool.shutdown(wait=False)

    def _tick(self) -> None:
        try:
            self.drain()
        finally:
            if not self._closed:
                self._schedule(self._poll_ms, self._tick)


__all__ = ["InlineTaskRunner", "ThreadTaskRunner"]

"""A thread pool that runs queued work functions."""

from __future__ import annotations

import threading
from typing import Callable

WorkFn = Callable[[], None]


class Pool:
    """Runs queued work on a fixed number of worker threads.

    Work is taken from the end of the queue.
    """

    def __init__(self, routines: int) -> None:
        if routines < 1:
            raise ValueError("a pool needs at least 1 worker")

        self._work: list[WorkFn] = []
        self._terminate = False
        self._cond = threading.Condition()
        self._threads = [
            threading.Thread(target=self._worker, daemon=True) for _ in range(routines)
        ]
        for thread in self._threads:
            thread.start()

    def _worker(self) -> None:
        while True:
            with self._cond:
                while not self._work and not self._terminate:
                    self._cond.wait()
                if not self._work:
                    return
                work_fn = self._work.pop()
            work_fn()

    def queue(self, work_fn: WorkFn) -> None:
        """Queue work for the pool; never blocks.

        Raises RuntimeError if the pool was already closed with wait().
        """
        with self._cond:
            if self._terminate:
                raise RuntimeError("work was queued on a closed pool")
            self._work.append(work_fn)
            self._cond.notify()

    def wait(self) -> None:
        """Wait until all queued work is done, then stop the workers."""
        with self._cond:
            self._terminate = True
            self._cond.notify_all()
        for thread in self._threads:
            thread.join()

    def __enter__(self) -> "Pool":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.wait()
"""Fixed-size worker pool draining a bounded queue of scan tasks."""

import logging
import queue
import threading
from collections.abc import Callable

from .models import ScanTask

logger = logging.getLogger(__name__)

_STOP = object()


class WaitGroup:
    """Counts outstanding work; ``wait`` blocks until it drops to zero."""

    def __init__(self):
        self._count = 0
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    def add(self, delta: int = 1) -> None:
        with self._cond:
            if self._count + delta < 0:
                raise ValueError("WaitGroup counter went negative")
            self._count += delta
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        """Return True once the counter is zero, False if ``timeout`` expired first."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)


class WorkerPool:
    """Runs ``handler`` for every submitted task on ``size`` threads.

    The caller registers each task on ``wait_group`` before submitting it;
    workers mark it done whatever the handler does.
    """

    def __init__(
        self,
        size: int,
        handler: Callable[[ScanTask], object],
        wait_group: WaitGroup | None = None,
        maxsize: int = 0,
    ):
        if size < 1:
            raise ValueError("worker pool needs at least one thread")
        self.size = size
        self.handler = handler
        self.wait_group = wait_group or WaitGroup()
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._threads: list[threading.Thread] = []
        self._closed = False

    def start(self) -> None:
        for index in range(self.size):
            thread = threading.Thread(
                target=self._work, name=f"h2scan-worker-{index}", daemon=True
            )
            thread.start()
            self._threads.append(thread)

    def submit(self, task: ScanTask) -> None:
        """Enqueue one task, blocking while the queue is full."""
        if self._closed:
            raise RuntimeError("worker pool is closed")
        self._queue.put(task)

    def close(self) -> None:
        """No more tasks; workers exit once the queue is drained."""
        if self._closed:
            return
        self._closed = True
        for _ in self._threads:
            self._queue.put(_STOP)

    def cancel(self) -> int:
        """Drop queued tasks and stop workers after their current task.

        Dropped tasks are marked done on the wait group. Returns how many
        were dropped.
        """
        dropped = 0
        while True:
            try:
                task = self._queue.get_nowait()
            except queue.Empty:
                break
            if task is not _STOP:
                dropped += 1
                self.wait_group.done()
        self._closed = True
        for _ in self._threads:
            self._queue.put(_STOP)
        return dropped

    def join(self, timeout: float | None = None) -> None:
        for thread in self._threads:
            thread.join(timeout)

    def _work(self) -> None:
        while True:
            task = self._queue.get()
            if task is _STOP:
                return
            try:
                self.handler(task)
            except Exception:
                logger.exception("Unexpected error scanning %s", task.address)
            finally:
                self.wait_group.done()

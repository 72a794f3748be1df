"""A fixed-size pool of worker threads that awaiting coroutines can move onto."""

from __future__ import annotations

import logging
import os
import queue
import threading
from collections.abc import Callable, Generator
from typing import Any

Resume = Callable[[], None]

_log = logging.getLogger(__name__)
_STOP = object()


class _ScheduleOperation:
    """Awaitable that resumes the awaiting coroutine on a pool thread."""

    def __init__(self, pool: StaticThreadPool) -> None:
        self._pool = pool

    def __await__(self) -> Generator[Callable[[Resume], bool], None, None]:
        yield self._suspend

    def _suspend(self, resume: Resume) -> bool:
        self._pool._enqueue(resume)
        return True


class StaticThreadPool:
    """Runs scheduled continuations on a fixed set of worker threads."""

    def __init__(self, thread_count: int | None = None) -> None:
        if thread_count is None:
            thread_count = os.cpu_count() or 1
        if thread_count < 1:
            raise ValueError("thread_count must be at least 1")
        self._thread_count = thread_count
        self._queue: queue.SimpleQueue[Any] = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._stopped = False
        self._threads = [
            threading.Thread(
                target=self._worker,
                name=f"StaticThreadPool-{index}",
                daemon=True,
            )
            for index in range(thread_count)
        ]
        for thread in self._threads:
            thread.start()

    def thread_count(self) -> int:
        """The number of worker threads in the pool."""
        return self._thread_count

    def schedule(self) -> _ScheduleOperation:
        """An awaitable that continues the awaiting coroutine on a pool thread."""
        return _ScheduleOperation(self)

    def shutdown(self) -> None:
        """Stop accepting work, let queued work finish and join the workers."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            for _ in self._threads:
                self._queue.put(_STOP)
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join()

    def __enter__(self) -> StaticThreadPool:
        return self

    def __exit__(self, *args: Any) -> None:
        self.shutdown()

    def _enqueue(self, resume: Resume) -> None:
        with self._lock:
            if self._stopped:
                raise RuntimeError("thread pool has been shut down")
            self._queue.put(resume)

    def _worker(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            try:
                item()
            except Exception:
                _log.exception("unhandled exception in scheduled work")
"""Run several awaitables concurrently and wait for all of them."""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Generator, Iterable
from functools import partial
from typing import Any, Callable

Resume = Callable[[], None]


class _Latch:
    """Counts completions; resumes the awaiter when the last one arrives."""

    def __init__(self, count: int) -> None:
        self._count = count + 1
        self._lock = threading.Lock()
        self._continuation: Resume | None = None

    def notify(self) -> None:
        with self._lock:
            self._count -= 1
            continuation = self._continuation if self._count == 0 else None
        if continuation is not None:
            continuation()

    def try_await(self, resume: Resume) -> bool:
        with self._lock:
            self._continuation = resume
            self._count -= 1
            return self._count != 0


class ReadyTask:
    """The outcome of one awaitable run by :func:`when_all_ready`."""

    def __init__(self, awaitable: Awaitable[Any]) -> None:
        self._awaitable: Awaitable[Any] | None = awaitable
        self._steps: Any = None
        self._latch: _Latch | None = None
        self._done = False
        self._value: Any = None
        self._exception: BaseException | None = None

    def result(self) -> Any:
        """Return the value, or raise the exception, the awaitable produced."""
        if not self._done:
            raise RuntimeError("awaitable has not completed")
        if self._exception is not None:
            raise self._exception
        return self._value

    def _start(self, latch: _Latch) -> None:
        self._latch = latch
        self._steps = self._awaitable.__await__()
        self._run()

    def _run(self) -> None:
        steps = self._steps
        while True:
            try:
                op = steps.send(None)
            except StopIteration as stop:
                self._finish(stop.value, None)
                return
            except BaseException as exc:  # kept for result() to raise
                self._finish(None, exc)
                return
            if not callable(op):
                steps.close()
                self._finish(None, TypeError(f"cannot await {op!r}"))
                return
            if op(self._run):
                return

    def _finish(self, value: Any, exception: BaseException | None) -> None:
        self._value = value
        self._exception = exception
        self._done = True
        self._steps = None
        self._awaitable = None
        self._latch.notify()


class _WhenAllReady:
    def __init__(self, tasks: tuple[ReadyTask, ...] | list[ReadyTask]) -> None:
        self._tasks = tasks
        self._awaited = False

    def __await__(self) -> Generator[Any, None, Any]:
        if self._awaited:
            raise RuntimeError("when_all_ready() result can only be awaited once")
        self._awaited = True
        if self._tasks:
            latch = _Latch(len(self._tasks))
            yield partial(self._start_all, latch)
        return self._tasks

    def _start_all(self, latch: _Latch, resume: Resume) -> bool:
        for task in self._tasks:
            task._start(latch)
        return latch.try_await(resume)


class _WhenAll:
    def __init__(self, ready: _WhenAllReady) -> None:
        self._ready = ready

    def __await__(self) -> Generator[Any, None, Any]:
        tasks = yield from self._ready.__await__()
        results = [task.result() for task in tasks]
        return tuple(results) if isinstance(tasks, tuple) else results


def _collect(args: tuple[Any, ...]) -> tuple[list[Any], bool]:
    if len(args) == 1 and not isinstance(args[0], Awaitable) and isinstance(args[0], Iterable):
        return list(args[0]), False
    return list(args), True


def when_all_ready(*args: Any) -> Awaitable[Any]:
    """Await every awaitable, collecting outcomes without raising.

    Called with several awaitables it yields a tuple of :class:`ReadyTask`;
    called with one iterable of awaitables it yields a list. Nothing starts
    until the result is awaited; the awaitables then start in order.
    """
    awaitables, variadic = _collect(args)
    for item in awaitables:
        if not isinstance(item, Awaitable):
            raise TypeError(f"{item!r} is not awaitable")
    tasks = [ReadyTask(item) for item in awaitables]
    return _WhenAllReady(tuple(tasks) if variadic else tasks)


def when_all(*args: Any) -> Awaitable[Any]:
    """Await every awaitable and return their results.

    Results come back as a tuple for several arguments or a list for one
    iterable. If any awaitable failed, the first failure in order is raised
    once all have finished.
    """
    return _WhenAll(when_all_ready(*args))
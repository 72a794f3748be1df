"""Lazily started tasks built on a callback-driven await protocol.

An awaitable in this package suspends by yielding a callable ``suspend(resume)``.
The driver calls it with a zero-argument ``resume`` function. If ``suspend``
returns ``True`` it has taken charge of calling ``resume`` exactly once, possibly
from another thread. If it returns ``False`` the driver continues at once and
``resume`` is never called.
"""

from __future__ import annotations

import threading
from collections.abc import Awaitable, Callable, Coroutine, Generator
from typing import Any

Resume = Callable[[], None]
Suspend = Callable[[Resume], bool]


class BrokenPromise(RuntimeError):
    """Raised when a task that holds no coroutine is awaited."""

    def __init__(self, message: str = "broken promise") -> None:
        super().__init__(message)


class Task:
    """A coroutine that runs only once it is first awaited.

    The result stays with the task, so a completed task can be awaited again
    and yields the same value (or raises the same exception) each time.
    Only one awaiter may wait for a task while it is still running.
    """

    def __init__(self, coroutine: Coroutine[Any, Any, Any] | None = None) -> None:
        self._coro = coroutine
        self._broken = coroutine is None
        self._lock = threading.Lock()
        self._started = False
        self._done = False
        self._awaited = False
        self._value: Any = None
        self._exception: BaseException | None = None
        self._continuation: Resume | None = None

    def __del__(self) -> None:
        coro = getattr(self, "_coro", None)
        if coro is not None:
            self._coro = None
            coro.close()

    def is_ready(self) -> bool:
        """Whether awaiting the task would complete without suspending."""
        return self._broken or self._done

    def when_ready(self) -> Awaitable[None]:
        """An awaitable that waits for completion without fetching the result."""
        return _WhenReady(self)

    def __await__(self) -> Generator[Suspend, None, Any]:
        if self._broken:
            raise BrokenPromise()
        yield from self._wait()
        if self._exception is not None:
            raise self._exception
        return self._value

    def _wait(self) -> Generator[Suspend, None, None]:
        with self._lock:
            if self._done:
                return
            if self._awaited:
                raise RuntimeError("task is already being awaited")
            self._awaited = True
        yield self._suspend

    def _suspend(self, resume: Resume) -> bool:
        with self._lock:
            start = not self._started
            self._started = True
        if start:
            self._run()
        with self._lock:
            if self._done:
                self._awaited = False
                return False
            self._continuation = resume
            return True

    def _run(self) -> None:
        coro = self._coro
        if coro is None:
            return
        while True:
            try:
                op = coro.send(None)
            except StopIteration as stop:
                self._complete(stop.value, None)
                return
            except BaseException as exc:  # the task keeps whatever escaped it
                self._complete(None, exc)
                return
            if not callable(op):
                coro.close()
                self._complete(None, TypeError(f"cannot await {op!r} inside a task"))
                return
            if op(self._run):
                return

    def _complete(self, value: Any, exception: BaseException | None) -> None:
        with self._lock:
            self._value = value
            self._exception = exception
            self._done = True
            self._coro = None
            continuation, self._continuation = self._continuation, None
            if continuation is not None:
                self._awaited = False
        if continuation is not None:
            continuation()


class _WhenReady:
    """Waits for a task to finish, ignoring its outcome."""

    def __init__(self, task: Task) -> None:
        self._task = task

    def __await__(self) -> Generator[Suspend, None, None]:
        if not self._task._broken:
            yield from self._task._wait()


def make_task(awaitable: Awaitable[Any]) -> Task:
    """Wrap any awaitable in a lazily started task."""

    async def _await_it() -> Any:
        return await awaitable

    return Task(_await_it())
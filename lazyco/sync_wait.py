"""Blocking wait for an awaitable from synchronous code."""

from __future__ import annotations

import threading
from collections.abc import Awaitable
from typing import Any


def sync_wait(awaitable: Awaitable[Any]) -> Any:
    """Drive ``awaitable`` to completion, blocking the calling thread.

    Returns its result or raises its exception. Resumption may come from any
    thread; the caller sleeps until it does.
    """
    if not isinstance(awaitable, Awaitable):
        raise TypeError(f"{awaitable!r} is not awaitable")
    steps = awaitable.__await__()
    resumed = threading.Event()
    while True:
        try:
            op = steps.send(None)
        except StopIteration as stop:
            return stop.value
        if not callable(op):
            steps.close()
            raise TypeError(f"cannot wait on {op!r}")
        resumed.clear()
        if op(resumed.set):
            resumed.wait()
import gc
import weakref

import pytest

from lazyco.sync_wait import sync_wait
from lazyco.task import BrokenPromise, Task, make_task
from lazyco.when_all import when_all_ready


class _Event:
    def __init__(self):
        self._is_set = False
        self._waiters = []

    def set(self):
        self._is_set = True
        waiters, self._waiters = self._waiters, []
        for resume in waiters:
            resume()

    def __await__(self):
        yield self._suspend

    def _suspend(self, resume):
        if self._is_set:
            return False
        self._waiters.append(resume)
        return True


class _Payload:
    pass


class _Bogus:
    def __await__(self):
        yield 42


def test_task_does_not_start_until_awaited():
    started = []

    async def func():
        started.append(True)

    async def main():
        t = Task(func())
        before = list(started)
        await t
        return before, list(started)

    assert sync_wait(main()) == ([], [True])


def test_awaiting_default_constructed_task_raises_broken_promise():
    async def main():
        try:
            await Task()
        except BrokenPromise:
            return "broken"
        return "no error"

    assert sync_wait(main()) == "broken"
    with pytest.raises(BrokenPromise):
        sync_wait(Task())


def test_awaiting_task_that_completes_asynchronously():
    log = []
    event = _Event()

    async def f():
        log.append("before")
        await event
        log.append("after")

    async def main():
        t = Task(f())
        early = list(log)

        async def awaiter():
            await t
            return list(log)

        async def setter():
            seen_before = list(log)
            event.set()
            return seen_before, list(log)

        first, second = await when_all_ready(awaiter(), setter())
        return early, first.result(), second.result()

    early, after_await, (before_set, after_set) = sync_wait(main())
    assert early == []
    assert after_await == ["before", "after"]
    assert before_set == ["before"]
    assert after_set == ["before", "after"]


def test_destroying_task_never_awaited_releases_captured_args():
    payload = _Payload()
    ref = weakref.ref(payload)

    async def f(c):
        return c

    t = Task(f(payload))
    del payload
    assert ref() is not None
    del t
    gc.collect()
    assert ref() is None


def test_task_destructor_releases_result():
    async def f():
        return _Payload()

    t = Task(f())
    result = sync_wait(t)
    ref = weakref.ref(result)
    del result
    assert isinstance(ref(), _Payload)
    del t
    gc.collect()
    assert ref() is None


def test_task_returns_same_object():
    value = [3]

    async def f():
        return value

    async def main():
        t = Task(f())
        from_lvalue = await t
        from_rvalue = await Task(f())
        return from_lvalue, from_rvalue

    first, second = sync_wait(main())
    assert first is value
    assert second is value


def test_lots_of_synchronous_completions_do_not_overflow_stack():
    async def completes_synchronously():
        return 1

    async def run():
        total = 0
        for _ in range(1_000_000):
            total += await Task(completes_synchronously())
        return total

    assert sync_wait(Task(run())) == 1_000_000


def test_make_task_is_lazy():
    async def one():
        return 1

    t = make_task(Task(one()))
    assert not t.is_ready()
    assert sync_wait(t) == 1
    assert t.is_ready()


def test_completed_task_can_be_awaited_again():
    async def make():
        return "foo"

    t = Task(make())
    assert sync_wait(t) == "foo"
    assert sync_wait(t) == "foo"


def test_exception_is_rethrown_from_await():
    async def fails():
        raise ValueError("boom")

    t = Task(fails())
    with pytest.raises(ValueError, match="boom"):
        sync_wait(t)
    assert t.is_ready()
    with pytest.raises(ValueError, match="boom"):
        sync_wait(t)


def test_when_ready_does_not_raise_result():
    async def fails():
        raise ValueError("boom")

    t = Task(fails())

    async def main():
        await t.when_ready()
        return t.is_ready()

    assert sync_wait(main()) is True
    with pytest.raises(ValueError):
        sync_wait(t)


def test_when_ready_on_default_task_completes():
    t = Task()
    assert t.is_ready()
    assert sync_wait(t.when_ready()) is None


def test_awaiting_foreign_object_raises_type_error():
    async def f():
        await _Bogus()

    with pytest.raises(TypeError):
        sync_wait(Task(f()))
"""Sequence barriers and a single-producer sequencer for ring buffers."""

from __future__ import annotations

import threading
from collections.abc import Callable, Generator
from typing import Any

Resume = Callable[[], None]

INITIAL_SEQUENCE = -1


class _Awaitable:
    """Adapts a generator factory to the await protocol."""

    def __init__(self, factory: Callable[[], Generator[Any, None, Any]]) -> None:
        self._factory = factory

    def __await__(self) -> Generator[Any, None, Any]:
        return self._factory()


class _WaitOperation:
    """Waits until a barrier has published a target sequence number."""

    def __init__(self, barrier: SequenceBarrier, target: int, scheduler: Any) -> None:
        self._barrier = barrier
        self._target = target
        self._scheduler = scheduler
        self._suspended = False

    def __await__(self) -> Generator[Any, None, int]:
        barrier = self._barrier
        if barrier._last_published >= self._target:
            return barrier._last_published
        yield self._suspend
        if self._suspended and self._scheduler is not None:
            yield from self._scheduler.schedule().__await__()
        return barrier._last_published

    def _suspend(self, resume: Resume) -> bool:
        barrier = self._barrier
        with barrier._lock:
            if barrier._last_published >= self._target:
                return False
            self._suspended = True
            barrier._waiters.append((self._target, resume))
        return True


class SequenceBarrier:
    """Tracks the last published sequence number and wakes those waiting for it."""

    def __init__(self, initial_sequence: int = INITIAL_SEQUENCE) -> None:
        self._last_published = initial_sequence
        self._lock = threading.Lock()
        self._waiters: list[tuple[int, Resume]] = []

    def publish(self, sequence: int) -> None:
        """Publish ``sequence``; all earlier numbers count as published too."""
        with self._lock:
            self._last_published = sequence
            ready = [resume for target, resume in self._waiters if target <= sequence]
            self._waiters = [
                (target, resume) for target, resume in self._waiters if target > sequence
            ]
        for resume in ready:
            resume()

    def last_published(self) -> int:
        """The most recently published sequence number."""
        return self._last_published

    def wait_until_published(self, target_sequence: int, scheduler: Any = None) -> _WaitOperation:
        """Await until ``target_sequence`` is published.

        The result is the last published sequence number, at least the target.
        If the awaiter had to suspend it is resumed through ``scheduler``, or
        directly on the publishing thread when ``scheduler`` is None.
        """
        return _WaitOperation(self, target_sequence, scheduler)


class SingleProducerSequencer:
    """Hands out ring-buffer slots to one producer, bounded by the consumers."""

    def __init__(
        self,
        consumer_barrier: SequenceBarrier,
        buffer_size: int,
        initial_sequence: int = INITIAL_SEQUENCE,
    ) -> None:
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        self._consumer_barrier = consumer_barrier
        self._buffer_size = buffer_size
        self._next_to_claim = initial_sequence + 1
        self._producer_barrier = SequenceBarrier(initial_sequence)

    def claim_one(self, scheduler: Any = None) -> _Awaitable:
        """Await a free slot; the result is its sequence number."""
        return _Awaitable(lambda: self._claim_one(scheduler))

    def claim_up_to(self, count: int, scheduler: Any = None) -> _Awaitable:
        """Await at least one and at most ``count`` contiguous free slots.

        The result is a ``range`` of the claimed sequence numbers.
        """
        return _Awaitable(lambda: self._claim_up_to(count, scheduler))

    def publish(self, sequences: int | range) -> None:
        """Publish a sequence number, or the last number of a claimed range."""
        if isinstance(sequences, range):
            if not sequences:
                raise ValueError("cannot publish an empty range")
            sequences = sequences[-1]
        self._producer_barrier.publish(sequences)

    def last_published(self) -> int:
        """The last sequence number the producer published."""
        return self._producer_barrier.last_published()

    def wait_until_published(self, target_sequence: int, scheduler: Any = None) -> _WaitOperation:
        """Await until the producer has published ``target_sequence``."""
        return self._producer_barrier.wait_until_published(target_sequence, scheduler)

    def _wait_for_space(self, scheduler: Any) -> Generator[Any, None, int]:
        target = self._next_to_claim - self._buffer_size
        return (
            yield from self._consumer_barrier.wait_until_published(target, scheduler).__await__()
        )

    def _claim_one(self, scheduler: Any) -> Generator[Any, None, int]:
        yield from self._wait_for_space(scheduler)
        sequence = self._next_to_claim
        self._next_to_claim += 1
        return sequence

    def _claim_up_to(self, count: int, scheduler: Any) -> Generator[Any, None, range]:
        consumed = yield from self._wait_for_space(scheduler)
        last_available = consumed + self._buffer_size
        begin = self._next_to_claim
        available = last_available - begin + 1
        end = begin + min(count, available)
        self._next_to_claim = end
        return range(begin, end)
# lazyco

Lazy, composable awaitables for Python, and the tools to drive them from
ordinary synchronous code. The package uses only the standard library and
needs Python 3.10 or later.

- `lazyco.task`: `Task`, `BrokenPromise`, `make_task`
- `lazyco.sync_wait`: `sync_wait`
- `lazyco.when_all`: `when_all`, `when_all_ready`, `ReadyTask`
- `lazyco.static_thread_pool`: `StaticThreadPool`
- `lazyco.sequencer`: `SequenceBarrier`, `SingleProducerSequencer`
- `lazyco.files`: `WriteOnlyFile`, `WritableFile`, `FileOpenMode`,
  `FileShareMode`, `FileBufferingMode`

## How awaiting works

The awaitables here do not need an event loop. An awaitable suspends by
yielding a callable `suspend(resume)`. Whoever drives it calls `suspend` with
a zero-argument `resume` function.

- If `suspend` returns `True`, it has taken on the job of calling `resume`
  exactly once. It may do so from another thread.
- If `suspend` returns `False`, the driver carries on at once.

`sync_wait`, `Task` and `when_all_ready` are all drivers of this kind. These
awaitables cannot be awaited from an `asyncio` event loop.

## Tasks

```python
from lazyco.task import Task, BrokenPromise, make_task
from lazyco.sync_wait import sync_wait

async def compute():
    return 41 + 1

t = Task(compute())
assert not t.is_ready()      # nothing has run yet
assert sync_wait(t) == 42    # runs the coroutine
assert t.is_ready()
assert sync_wait(t) == 42    # the stored result is reused
```

A `Task` holds a coroutine and does not start it until the task is first
awaited. The task keeps the result, or the exception the coroutine raised. A
finished task can be awaited again and gives the same outcome each time.

- Only one awaiter may wait on a task while it is still running. A second one
  raises `RuntimeError`.
- Awaiting `Task()` or `Task(None)` raises `BrokenPromise`, which is a
  `RuntimeError`.
- `when_ready()` returns an awaitable that waits for the task to finish. It
  does not fetch the result and does not raise the task's exception.
- `make_task(awaitable)` wraps any awaitable in a new lazy `Task`.

A task's coroutine may await awaitables from this package, or other `Task`s.
Any other object it yields ends the task with a `TypeError`.

## Blocking wait

`sync_wait(awaitable)` drives the awaitable to completion on the calling
thread. If the awaitable suspends, the calling thread sleeps until it is
resumed. `sync_wait` returns the result or raises the exception. Passing
something that is not awaitable raises `TypeError`.

## Waiting on several awaitables

```python
from lazyco.when_all import when_all, when_all_ready

async def one():
    return 1

async def two():
    return 2

async def main():
    a, b = await when_all(Task(one()), Task(two()))
    ready = await when_all_ready(Task(one()), Task(two()))
    values = [r.result() for r in ready]
    return a + b, values

assert sync_wait(main()) == (3, [1, 2])
```

Both functions take either several awaitables or a single iterable of
awaitables. Nothing starts until the result is awaited. The awaitables then
start in order, and the awaiter resumes once the last one has finished. The
object either function returns can be awaited only once.

- `when_all_ready` never raises because of what the awaitables did. It returns
  `ReadyTask` objects: a tuple for separate arguments, a list for an iterable.
  `ReadyTask.result()` returns the value or re-raises the exception.
- `when_all` returns the results in the same order and shape. An awaitable
  with no result gives `None`. If any awaitable failed, the first failure in
  order is raised after all of them have finished.

## Thread pool

```python
from lazyco.static_thread_pool import StaticThreadPool

with StaticThreadPool(4) as pool:
    async def work():
        await pool.schedule()   # continue on a pool worker thread
        return sum(i * i for i in range(1000))

    print(sync_wait(work()))
```

- `StaticThreadPool()` with no argument starts one worker per CPU, as
  `os.cpu_count()` reports. A count below 1 raises `ValueError`.
- `thread_count()` returns the number of workers.
- `await pool.schedule()` continues the awaiting coroutine on a worker thread.
  Work is taken from a single shared queue. An exception that escapes
  scheduled work is logged and does not reach the awaiter.
- `shutdown()` stops the pool from accepting new work and lets the work
  already queued finish. It then joins the workers. Leaving a `with` block
  calls `shutdown()`. Scheduling after shutdown raises `RuntimeError`.

## Sequencer

```python
from lazyco.sequencer import SequenceBarrier, SingleProducerSequencer

read_barrier = SequenceBarrier()
sequencer = SingleProducerSequencer(read_barrier, 256)
```

Sequence numbers are plain integers and start after `-1` by default.

`SequenceBarrier` records the last published sequence number.

- `publish(seq)` records `seq`. Everything up to `seq` counts as published.
- `last_published()` returns the last published number.
- `await barrier.wait_until_published(seq, scheduler)` returns the last
  published number, which is at least `seq`. If the awaiter had to wait, it
  is resumed through `scheduler.schedule()`, for example a
  `StaticThreadPool`. If `scheduler` is `None`, it is resumed on the
  publishing thread.

`SingleProducerSequencer(consumer_barrier, buffer_size)` hands out slots in a
ring buffer to one producer. It never lets the producer get more than
`buffer_size` slots ahead of what the consumers have published on
`consumer_barrier`. A `buffer_size` below 1 raises `ValueError`.

- `await claim_one(scheduler)` returns the next sequence number.
- `await claim_up_to(count, scheduler)` claims between one and `count`
  contiguous slots and returns them as a `range`.
- `publish(seq_or_range)` publishes a number, or the last number of a range.
  An empty range raises `ValueError`.
- `last_published()` returns the last number the producer published.
- `wait_until_published(seq, scheduler)` lets consumers wait for the producer.

## Files

```python
from lazyco.files import WriteOnlyFile, FileOpenMode

async def save(path):
    with WriteOnlyFile.open(path, FileOpenMode.CREATE_ALWAYS) as f:
        await f.write(0, b"hello")
        await f.write(5, b" world")
        return f.size()

assert sync_wait(save("out.txt")) == 11
```

`WriteOnlyFile.open(path, open_mode, share_mode, buffering_mode)` opens a file
for writing only. If the file cannot be opened it raises `OSError`, for
example when `CREATE_NEW` is asked for and the file exists. The open modes
are:

- `CREATE_OR_OPEN` (the default)
- `CREATE_ALWAYS`
- `CREATE_NEW`
- `OPEN_EXISTING`
- `TRUNCATE_EXISTING`

The other two options have limited effect:

- `FileShareMode` is stored on the file but enforces nothing.
- Of the `FileBufferingMode` flags, only `WRITE_THROUGH` has an effect: it
  opens the file for synchronous data writes. The other flags are stored as
  hints.

A `WritableFile` offers:

| Operation | What it does |
| --- | --- |
| `size()` | The current length of the file in bytes. |
| `set_size(n)` | Truncates or extends the file to `n` bytes. |
| `write(offset, data)` | An awaitable. When awaited, it writes all of `data` (any bytes-like object) at `offset` and returns the number of bytes written. |
| `close()` | Closes the file. Later operations raise `ValueError`. |

A negative size or offset raises `ValueError`.

## What it does not do

- The package can only open files for writing. It has no read-only or
  read-write file type.
- The write runs on the awaiting thread when the awaitable is awaited. It is
  not handed to a background I/O service and cannot be cancelled.
- There are no sockets, timers or cancellation tokens.
- There is no command-line program.
"""Cross products of asynchronous sequences.

``cross_combine`` pairs every value of one async iterable with every value
of another as the values arrive, whichever side produces first.
``all_permutations`` folds it over a list of iterables to enumerate every
tuple that picks one value per input.

Both inputs of ``cross_combine`` are consumed concurrently by pump tasks.
The two buffers of values seen so far are shared between the pumps and are
only touched under a single ``asyncio.Lock``; pairs are handed to the
consumer through a queue, so the lock is never held while the consumer
runs. Closing the output generator cancels both pumps, and cancellation
reaches any nested combiners they are iterating.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Callable,
    Generic,
    Iterable,
    Sequence,
    TypeVar,
)

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


# ---------------------------------------------------------------------------
# Sequence helpers
# ---------------------------------------------------------------------------


@asynccontextmanager
async def closing(iterable: AsyncIterable[T]) -> AsyncIterator[AsyncIterator[T]]:
    """Iterate *iterable* and close its iterator on exit, even on early break."""
    iterator = aiter(iterable)
    try:
        yield iterator
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()


async def single(value: T) -> AsyncIterator[T]:
    yield value


async def from_iterable(values: Iterable[T]) -> AsyncIterator[T]:
    for value in values:
        yield value


async def amap(func: Callable[[T], R], source: AsyncIterable[T]) -> AsyncIterator[R]:
    async with closing(source) as values:
        async for value in values:
            yield func(value)


# ---------------------------------------------------------------------------
# cross_combine
# ---------------------------------------------------------------------------


_DONE = object()


@dataclass(frozen=True)
class _Failure:
    error: Exception


class _CrossCombiner(Generic[T, U]):
    """Shared state of one ``cross_combine`` run."""

    def __init__(self, left: AsyncIterable[T], right: AsyncIterable[U]) -> None:
        self._left = left
        self._right = right
        self._left_values: list[T] = []
        self._right_values: list[U] = []
        self._gate: asyncio.Lock | None = None
        self._queue: asyncio.Queue[Any] | None = None

    async def _pump_left(self) -> None:
        async with closing(self._left) as values:
            async for value in values:
                async with self._gate:
                    for other in self._right_values:
                        self._queue.put_nowait((value, other))
                    self._left_values.append(value)

    async def _pump_right(self) -> None:
        async with closing(self._right) as values:
            async for value in values:
                async with self._gate:
                    for other in self._left_values:
                        self._queue.put_nowait((other, value))
                    self._right_values.append(value)

    async def _run_pump(self, pump: Callable[[], Any]) -> None:
        try:
            await pump()
        except Exception as exc:
            self._queue.put_nowait(_Failure(exc))
        else:
            self._queue.put_nowait(_DONE)

    async def pairs(self) -> AsyncIterator[tuple[T, U]]:
        # Created here so they belong to the running loop.
        self._gate = asyncio.Lock()
        self._queue = asyncio.Queue()
        tasks = [
            asyncio.create_task(self._run_pump(self._pump_left)),
            asyncio.create_task(self._run_pump(self._pump_right)),
        ]
        pending = len(tasks)
        try:
            while pending:
                item = await self._queue.get()
                if item is _DONE:
                    pending -= 1
                elif isinstance(item, _Failure):
                    raise item.error
                else:
                    yield item
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)


def cross_combine(
    left: AsyncIterable[T], right: AsyncIterable[U]
) -> AsyncIterator[tuple[T, U]]:
    """Yield every ``(a, b)`` with ``a`` from *left* and ``b`` from *right*.

    Each pair is yielded exactly once, as soon as both of its halves have
    arrived. Completes when both inputs are exhausted and every pair has
    been yielded; re-raises the first exception raised by either input.
    """
    return _CrossCombiner(left, right).pairs()


# ---------------------------------------------------------------------------
# all_permutations
# ---------------------------------------------------------------------------


def _extend(pair: tuple[tuple[Any, ...], Any]) -> tuple[Any, ...]:
    chosen, value = pair
    return (*chosen, value)


def all_permutations(
    sequences: Sequence[AsyncIterable[T]],
) -> AsyncIterator[tuple[T, ...]]:
    """Yield every tuple choosing one value from each of *sequences*.

    Tuple positions follow the order of *sequences*. With no sequences the
    result is a single empty tuple.
    """
    combined: AsyncIterator[tuple[T, ...]] = single(())
    for sequence in sequences:
        combined = amap(_extend, cross_combine(combined, sequence))
    return combined

"""Run-a-batch-and-join primitive shared by both scheduling levels."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ALL_COMPLETED, Executor, Future, wait
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def cancelled(event: threading.Event | None) -> bool:
    """Return ``True`` if the optional *event* is set."""

    return bool(event is not None and event.is_set())


def partition(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of *items* holding at most *size* entries."""

    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    for offset in range(0, len(items), size):
        yield list(items[offset : offset + size])


@dataclass(frozen=True)
class BatchOutcome(Generic[T, R]):
    """Result of running one item of a batch."""

    item: T
    result: R | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_batch(
    executor: Executor, func: Callable[[T], R], items: Sequence[T]
) -> list[BatchOutcome[T, R]]:
    """Run ``func(item)`` for every item concurrently and wait for all of them.

    Items are submitted in order. The call returns only after every submitted
    future finished, so callers may read results without further locking.
    A failing item, whether it raised or could not be dispatched, is reported
    in its own outcome and never cancels its siblings. Outcomes follow the
    order of *items*.
    """

    outcomes: list[BatchOutcome[T, R] | None] = [None] * len(items)
    futures: dict[Future[Any], int] = {}
    abandoned: set[int] = set()
    released = threading.Event()

    def guarded(index: int) -> Any:
        # A refused submit may still have queued the call; it must not run.
        released.wait()
        if index in abandoned:
            return None
        return func(items[index])

    try:
        for index, item in enumerate(items):
            try:
                futures[executor.submit(guarded, index)] = index
            except RuntimeError as exc:
                logger.warning("could not dispatch %r: %s", item, exc)
                abandoned.add(index)
                outcomes[index] = BatchOutcome(item, error=exc)
    finally:
        released.set()

    wait(futures, return_when=ALL_COMPLETED)

    for future, index in futures.items():
        exc = future.exception()
        if exc is not None:
            outcomes[index] = BatchOutcome(items[index], error=exc)
        else:
            outcomes[index] = BatchOutcome(items[index], result=future.result())
    return [outcome for outcome in outcomes if outcome is not None]


__all__ = ["BatchOutcome", "cancelled", "partition", "run_batch"]

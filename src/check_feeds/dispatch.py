"""Bounded-parallel execution of per-feed work."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], R],
    parallelism: int,
) -> list[R]:
    """
    Call `worker` once for every item with at most `parallelism` calls in flight.

    Each call writes into its own slot, indexed by the item's position, so
    the returned list lines up with `items` whatever order the calls
    finish in. Returns only after every call has completed.
    """
    if parallelism < 1:
        raise ValueError(f"parallelism must be at least 1, got {parallelism}")

    slots: list = [None] * len(items)
    if not items:
        return slots

    def _run(index: int, item: T) -> None:
        slots[index] = worker(item)

    max_workers = min(parallelism, len(items))
    logger.debug("Dispatching %d items across %d workers", len(items), max_workers)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="feed-check") as executor:
        futures = [executor.submit(_run, index, item) for index, item in enumerate(items)]
        for future in futures:
            future.result()

    return slots

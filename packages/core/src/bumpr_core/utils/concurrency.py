"""Fan-out helper for the stages that run independent sub-operations at once."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")

_MAX_WORKERS = 8


def run_concurrently(func: Callable[[T], R], items: Iterable[T]) -> list[R]:
    """Call ``func`` on every item concurrently and return results in input order.

    Waits for every call to finish. If any call raised, the exception of the
    earliest-submitted failed call is re-raised; results of calls that did
    succeed are discarded.
    """
    items = list(items)
    if not items:
        return []

    with ThreadPoolExecutor(max_workers=min(_MAX_WORKERS, len(items))) as pool:
        futures = [pool.submit(func, item) for item in items]

    for future in futures:
        error = future.exception()
        if error is not None:
            raise error
    return [future.result() for future in futures]

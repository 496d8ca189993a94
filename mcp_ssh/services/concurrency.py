"""Bounded-concurrency fan-out over a list of inputs."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
    on_error: Callable[[T, Exception], R] | None = None,
) -> list[R]:
    """Run ``worker`` over ``items`` with at most ``limit`` calls in flight.

    A new item starts as soon as any running call finishes. Results are
    returned in input order: ``results[i]`` belongs to ``items[i]``.

    Workers are expected to encode their own failures in the result. If
    one raises anyway and ``on_error`` is given, ``on_error(item, exc)``
    becomes that item's result; without it the exception propagates after
    every other item has finished. Siblings are never cancelled.

    Args:
        items: Inputs to process
        worker: Async function called once per item
        limit: Maximum concurrent calls; values below 1 run sequentially
        on_error: Optional converter from an exception to a result

    Returns:
        One result per input, in input order
    """
    if not items:
        return []

    limit = min(max(limit, 1), len(items))
    semaphore = asyncio.Semaphore(limit)

    async def _run(item: T) -> R:
        async with semaphore:
            return await worker(item)

    logger.debug("Running %d item(s) with concurrency %d", len(items), limit)
    outcomes = await asyncio.gather(
        *(_run(item) for item in items), return_exceptions=True
    )

    results: list[R] = []
    for item, outcome in zip(items, outcomes):
        if isinstance(outcome, Exception):
            if on_error is None:
                raise outcome
            logger.warning("Worker failed for %r: %s", item, type(outcome).__name__)
            results.append(on_error(item, outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)
    return results

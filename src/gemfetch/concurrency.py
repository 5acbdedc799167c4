"""Bounded, order-preserving, fail-fast task fan-out."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")


async def buffered(
    factories: Sequence[Callable[[], Awaitable[T]]],
    limit: int,
) -> list[T]:
    """Run awaitables with at most ``limit`` in flight, returning results in input order.

    Admission is a sliding window: as soon as one task finishes the next
    queued one starts. Each factory is only called once its task is admitted,
    so nothing is started for work that never runs.

    The first failure cancels every queued and in-flight task and is
    re-raised unchanged.

    Args:
        factories: Zero-argument callables producing the awaitables to run.
        limit: Maximum number of awaitables in flight at once.

    Returns:
        One result per factory, in the order the factories were given.

    Raises:
        ValueError: If ``limit`` is less than 1.
    """
    if limit < 1:
        raise ValueError(f"Concurrency limit must be at least 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def _one(factory: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await factory()

    tasks = [asyncio.create_task(_one(factory)) for factory in factories]
    try:
        # gather keeps input order and raises the first exception
        return await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

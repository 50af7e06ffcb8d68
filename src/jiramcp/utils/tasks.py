# Bounded asyncio fan-out
import asyncio
from collections.abc import Awaitable
from typing import Any


async def gather_with_concurrency(limit: int | None, *tasks: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently, at most `limit` at a time.

    ABOUTME: limit=None means unlimited
    ABOUTME: Exceptions are returned in place of results, never raised,
    ABOUTME: so one failing task cannot cancel its siblings

    Returns:
        Results (or exceptions) in the same order as tasks
    """
    if limit is None:
        return await asyncio.gather(*tasks, return_exceptions=True)

    if limit < 1:
        raise ValueError(f"Concurrency limit must be at least 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def sem_task(task: Awaitable[Any]) -> Any:
        async with semaphore:
            return await task

    return await asyncio.gather(*(sem_task(task) for task in tasks), return_exceptions=True)

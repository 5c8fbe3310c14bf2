"""
Async utilities for fan-out over independent network calls.

Provides:
- gather_settled: run coroutines concurrently and collect every outcome
- with_deadline: bound a coroutine, converting expiry into a typed error
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from scholar_search.shared.exceptions import ScholarSearchError

T = TypeVar("T")


async def gather_settled(*coros: Awaitable[T]) -> list[T | Exception]:
    """
    Execute coroutines in parallel and wait for all of them to settle.

    Uses a TaskGroup for structured concurrency, but every coroutine is wrapped
    so that a failure never cancels its siblings. Results keep the position of
    the coroutine that produced them, not completion order.

    Example:
        results = await gather_settled(fetch_crossref(q), fetch_arxiv(q))
        for result in results:
            if isinstance(result, Exception):
                ...
    """
    results: list[T | Exception] = [None] * len(coros)  # type: ignore[list-item]

    async def settle(coro: Awaitable[T], index: int) -> None:
        try:
            results[index] = await coro
        except Exception as e:
            results[index] = e

    async with asyncio.TaskGroup() as tg:
        for i, coro in enumerate(coros):
            tg.create_task(settle(coro, i))

    return results


async def with_deadline(
    coro: Awaitable[T],
    timeout: float,
    on_timeout: Callable[[], Exception],
) -> T:
    """
    Await ``coro`` for at most ``timeout`` seconds.

    On expiry the coroutine is cancelled and the exception built by
    ``on_timeout`` is raised in its place.
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except ScholarSearchError:
        # Typed timeouts raised inside the coroutine pass through untouched.
        raise
    except TimeoutError as e:
        raise on_timeout() from e

"""Async helpers shared by Celery tasks and the chunk runner."""

import asyncio
from collections.abc import Awaitable, Coroutine, Iterable
from typing import Any, TypeVar

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine from a synchronous Celery task.

    The current loop is reused when it is still open. httpx clients and
    executor-backed SDK calls stay bound to it between tasks, so it is never
    closed here.
    """
    try:
        loop = asyncio.get_event_loop()
        if loop.is_closed():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


async def gather_bounded(awaitables: Iterable[Awaitable[T]], limit: int) -> list[T]:
    """Await all items with at most ``limit`` running at once, preserving order."""
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _guarded(item: Awaitable[T]) -> T:
        async with semaphore:
            return await item

    return list(await asyncio.gather(*(_guarded(a) for a in awaitables)))


async def with_timeout(awaitable: Awaitable[T], seconds: float | None) -> T:
    """Await with a per-call timeout; ``None`` or non-positive disables it."""
    if not seconds or seconds <= 0:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout=seconds)

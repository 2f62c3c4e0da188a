"""
Async concurrency helpers.

The engine is async-first. `run_sync` lets synchronous completion
callables run without blocking the event loop, and `gather_all` is the
structured fan-out/fan-in primitive used by the parallel and
orchestrator-workers topologies.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING, Any, TypeVar

from .cancellation import CancelledError

if TYPE_CHECKING:
    from .cancellation import CancellationToken

T = TypeVar("T")


def _default_max_workers() -> int:
    # Mirrors ThreadPoolExecutor's default sizing heuristics.
    return min(32, (os.cpu_count() or 1) + 4)


_EXECUTOR = ThreadPoolExecutor(max_workers=_default_max_workers())


async def run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """
    Run a synchronous callable in a shared thread pool.

    The concurrent future is polled instead of awaited through
    `run_in_executor()` so a wakeup lost across threads cannot hang the
    caller.
    """
    future = _EXECUTOR.submit(partial(func, *args, **kwargs))
    try:
        while True:
            if future.done():
                return future.result()
            await asyncio.sleep(0.001)
    except asyncio.CancelledError:
        future.cancel()
        raise


async def gather_all(
    factories: Sequence[Callable[[], Awaitable[T]]],
    *,
    max_concurrency: int | None = None,
    cancellation_token: CancellationToken | None = None,
) -> list[T]:
    """
    Run every factory concurrently and return results in factory order.

    All branches are awaited to a terminal state before returning. If the
    caller is cancelled, or `cancellation_token` fires, every outstanding
    branch is cancelled and awaited before the cancellation propagates, so
    no branch outlives the call.

    Args:
        factories: Zero-argument callables producing one awaitable each
        max_concurrency: Maximum branches in flight at once (None = all)
        cancellation_token: Optional cooperative cancellation token

    Raises:
        CancelledError: If `cancellation_token` fired during the batch
    """
    if not factories:
        return []
    if cancellation_token is not None:
        cancellation_token.raise_if_cancelled()

    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _branch(factory: Callable[[], Awaitable[T]]) -> T:
        if semaphore is None:
            return await factory()
        async with semaphore:
            if cancellation_token is not None:
                cancellation_token.raise_if_cancelled()
            return await factory()

    tasks = [asyncio.ensure_future(_branch(factory)) for factory in factories]

    def _cancel_outstanding() -> None:
        for task in tasks:
            if not task.done():
                task.cancel()

    if cancellation_token is not None:
        cancellation_token.on_cancel(_cancel_outstanding)

    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        _cancel_outstanding()
        await asyncio.gather(*tasks, return_exceptions=True)
        if cancellation_token is not None and cancellation_token.is_cancelled:
            raise CancelledError("Workflow run was cancelled") from None
        raise
    finally:
        if cancellation_token is not None:
            cancellation_token.remove_callback(_cancel_outstanding)


__all__ = ["run_sync", "gather_all"]

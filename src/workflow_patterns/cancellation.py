"""Cancellation tokens for cooperative workflow interruption.

A CancellationToken lets a caller abandon a running workflow. Sequential
topologies check the token between steps; fan-out topologies register a
callback that cancels every outstanding branch task.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable


class CancelledError(Exception):
    """A workflow run was abandoned through its CancellationToken.

    Unrelated to asyncio.CancelledError, which the engine never catches.
    """


@dataclass
class CancellationToken:
    """Shared flag a caller flips to stop a workflow run.

    Usage:
        token = CancellationToken()
        task = asyncio.create_task(engine.run_parallel(steps, text, cancellation_token=token))

        # Later, from anywhere on the loop:
        token.cancel()
    """

    _event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _callbacks: list[Callable[[], Any]] = field(default_factory=list, init=False)

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Flip the flag; callbacks run on the first call only."""
        if not self.is_cancelled:
            self._event.set()
            for callback in tuple(self._callbacks):
                callback()

    async def wait(self) -> None:
        await self._event.wait()

    def on_cancel(self, callback: Callable[[], Any]) -> None:
        """Register `callback`; it runs right away when the token already fired."""
        self._callbacks.append(callback)
        if self.is_cancelled:
            callback()

    def remove_callback(self, callback: Callable[[], Any]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """
        Raises:
            CancelledError: once cancel() has been called
        """
        if self.is_cancelled:
            raise CancelledError("Workflow run was cancelled")


__all__ = ["CancellationToken", "CancelledError"]

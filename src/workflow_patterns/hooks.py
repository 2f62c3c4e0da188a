"""
Lightweight hooks for integration and local inspection.

Workflows emit these events:
- workflow.start / workflow.end
- step.start / step.end (every step) / step.error (failed steps)
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Iterable
from typing import Any, Protocol

from .logging import StructuredLogger, get_logger


class Hook(Protocol):
    """Receiver of workflow events. `emit` may be sync or async."""

    async def emit(self, event: str, payload: dict, context: Any) -> None: ...


class HookManager:
    """
    Fans each event out to the registered hooks, in registration order.

    A hook that raises is logged and skipped; the remaining hooks still
    receive the event and the caller never sees the error.
    """

    def __init__(self, hooks: Iterable[Hook] | None = None, *, logger: StructuredLogger | None = None) -> None:
        self._hooks: list[Hook] = [*hooks] if hooks else []
        self.logger = logger or get_logger()

    def add(self, hook: Hook) -> None:
        self._hooks.append(hook)

    def __len__(self) -> int:
        return len(self._hooks)

    async def emit(self, event: str, payload: dict, context: Any = None) -> None:
        for hook in self._hooks:
            try:
                outcome = hook.emit(event, payload, context)
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception as e:
                self.logger.warning(
                    f"Hook {type(hook).__name__} failed on {event}",
                    event_type="hook_error",
                    hook_event=event,
                    error=repr(e),
                )


class InMemoryMetricsHook:
    """
    Event counters plus per-step latencies, kept in memory.

    Used by the tests and the offline example; `snapshot()` returns plain
    dicts and lists so results compare cleanly.
    """

    def __init__(self) -> None:
        self.counters: Counter[str] = Counter()
        self.steps_by_label: Counter[str] = Counter()
        self.step_latencies_ms: list[float] = []
        self.errors: list[dict[str, Any]] = []

    async def emit(self, event: str, payload: dict, context: Any) -> None:
        self.counters[event] += 1
        if event == "step.end":
            self.steps_by_label[payload.get("label", "unknown")] += 1
            duration = payload.get("duration_ms")
            if duration is not None:
                self.step_latencies_ms.append(float(duration))
        elif event.endswith(".error"):
            self.errors.append({"event": event, "payload": payload})

    def snapshot(self) -> dict[str, Any]:
        return {
            "counters": dict(self.counters),
            "step_latencies_ms": self.step_latencies_ms.copy(),
            "steps_by_label": dict(self.steps_by_label),
            "errors": self.errors.copy(),
        }

    def reset(self) -> dict[str, Any]:
        """Clear everything; returns what was collected up to now."""
        previous = self.snapshot()
        for bucket in (self.counters, self.steps_by_label, self.step_latencies_ms, self.errors):
            bucket.clear()
        return previous


__all__ = ["Hook", "HookManager", "InMemoryMetricsHook"]

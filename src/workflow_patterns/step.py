"""
Step execution: one completion call with timeout and error normalization.

Every topology drives its model calls through `StepExecutor.execute`,
which never raises for a failed call. Timeouts and backend failures come
back as a `StepResult` carrying an `ErrorKind`, so each topology decides
its own partial-failure policy. `asyncio.CancelledError` is not a step
failure and always propagates.
"""

from __future__ import annotations

import asyncio

from .completion import Completion, CompletionFn, as_completion
from .errors import ErrorKind, WorkflowError
from .hooks import HookManager
from .logging import StepLog, StructuredLogger, Timer, get_logger, truncate_for_log
from .types import StepResult


class StepExecutor:
    """
    Wraps a completion backend for use by the workflow topologies.

    Args:
        completion: A `Completion` or a plain sync/async callable
        timeout: Default per-call timeout in seconds (None disables it)
        logger: Structured logger; defaults to the package logger
        hooks: Hook manager receiving step.start / step.end / step.error
    """

    def __init__(
        self,
        completion: Completion | CompletionFn,
        *,
        timeout: float | None = 60.0,
        logger: StructuredLogger | None = None,
        hooks: HookManager | None = None,
    ) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        self.completion = as_completion(completion)
        self.timeout = timeout
        self.logger = logger or get_logger()
        self.hooks = hooks or HookManager(logger=self.logger)

    async def execute(
        self,
        prompt: str,
        timeout: float | None = None,
        *,
        label: str = "",
    ) -> StepResult:
        """
        Invoke the completion backend exactly once.

        Args:
            prompt: Fully rendered prompt text
            timeout: Per-call timeout; falls back to the executor default
            label: Name of the step within its topology, recorded on the result

        Returns:
            A successful StepResult with the generated text, or a failed one
            with `ErrorKind.TIMEOUT` / `ErrorKind.PROVIDER_FAILURE`.
        """
        effective_timeout = self.timeout if timeout is None else timeout
        await self.hooks.emit("step.start", {"label": label, "prompt_chars": len(prompt)})

        timer = Timer()
        try:
            text = await asyncio.wait_for(
                self.completion.complete(prompt, timeout=effective_timeout),
                timeout=effective_timeout,
            )
        except Exception as e:
            kind = ErrorKind.from_exception(e)
            message = e.message if isinstance(e, WorkflowError) else str(e) or type(e).__name__
            if kind is ErrorKind.TIMEOUT and effective_timeout is not None and not str(e):
                message = f"Step timed out after {effective_timeout}s"
            result = StepResult.failure(kind, label=label, message=message, duration_ms=timer.stop())
        else:
            result = StepResult.success(text, label=label, duration_ms=timer.stop())

        self.logger.log_step(
            StepLog(
                label=label,
                success=result.ok,
                error=result.error.value if result.error else None,
                message=result.message,
                duration_ms=result.duration_ms,
                prompt_chars=len(prompt),
                output_chars=len(result.text or ""),
                prompt_preview=truncate_for_log(prompt),
            )
        )

        payload = {"label": label, "success": result.ok, "duration_ms": result.duration_ms}
        if not result.ok:
            payload["error"] = result.error.value
            await self.hooks.emit("step.error", payload)
        await self.hooks.emit("step.end", payload)
        return result


__all__ = ["StepExecutor"]

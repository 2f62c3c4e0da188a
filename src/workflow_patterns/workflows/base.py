"""
Shared plumbing for the workflow topologies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from ..errors import InvalidConfigError
from ..logging import Timer, WorkflowLog
from ..prompts import PromptTemplate, TemplateLike, as_template
from ..types import WorkflowResult

if TYPE_CHECKING:
    from ..cancellation import CancellationToken
    from ..step import StepExecutor

ConfigT = TypeVar("ConfigT")


def coerce_template(value: TemplateLike, field_name: str) -> PromptTemplate:
    try:
        return as_template(value)
    except TypeError as e:
        raise InvalidConfigError(str(e), field_name=field_name) from e


def coerce_templates(values: Sequence[TemplateLike], field_name: str) -> tuple[PromptTemplate, ...]:
    if isinstance(values, (str, PromptTemplate)):
        raise InvalidConfigError(f"{field_name} must be a sequence of templates", field_name=field_name)
    templates = tuple(coerce_template(v, field_name) for v in values)
    if not templates:
        raise InvalidConfigError(f"{field_name} must contain at least one template", field_name=field_name)
    return templates


def check_timeout(timeout: float | None) -> None:
    if timeout is not None and timeout <= 0:
        raise InvalidConfigError("timeout must be positive", field_name="timeout")


class Workflow(ABC, Generic[ConfigT]):
    """
    Base class for the five topologies.

    Subclasses implement `_execute`; `run` wraps it with trace
    correlation, workflow hooks and a summary log record.
    """

    pattern: ClassVar[str] = ""

    def __init__(self, executor: StepExecutor, config: ConfigT) -> None:
        self.executor = executor
        self.config = config

    async def run(
        self,
        input: str,
        *,
        cancellation_token: CancellationToken | None = None,
    ) -> WorkflowResult:
        """
        Execute the topology on `input`.

        Raises:
            CancelledError: If `cancellation_token` fired during the run
        """
        logger = self.executor.logger
        hooks = self.executor.hooks

        with logger.trace_context(pattern=self.pattern) as trace_id:
            await hooks.emit("workflow.start", {"pattern": self.pattern, "trace_id": trace_id})
            timer = Timer()
            result = await self._execute(input, cancellation_token)
            duration_ms = timer.stop()

            logger.log_workflow(
                WorkflowLog(
                    pattern=self.pattern,
                    steps=result.num_steps,
                    failed_steps=len(result.failed_steps),
                    success=result.ok,
                    error=result.error.value if result.error else None,
                    duration_ms=duration_ms,
                )
            )
            payload: dict[str, Any] = {
                "pattern": self.pattern,
                "trace_id": trace_id,
                "success": result.ok,
                "steps": result.num_steps,
                "duration_ms": duration_ms,
            }
            if result.error:
                payload["error"] = result.error.value
            await hooks.emit("workflow.end", payload)
        return result

    @abstractmethod
    async def _execute(
        self,
        input: str,
        cancellation_token: CancellationToken | None,
    ) -> WorkflowResult:
        ...

    def _step_timeout(self) -> float | None:
        return getattr(self.config, "timeout", None)

    @staticmethod
    def _checkpoint(cancellation_token: CancellationToken | None) -> None:
        if cancellation_token is not None:
            cancellation_token.raise_if_cancelled()


__all__ = ["Workflow", "coerce_template", "coerce_templates", "check_timeout"]

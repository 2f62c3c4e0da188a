"""Chain topology: an ordered sequence of steps, each fed the previous output."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..prompts import PromptTemplate, TemplateLike
from ..types import StepResult, WorkflowResult
from .base import Workflow, check_timeout, coerce_templates

if TYPE_CHECKING:
    from ..cancellation import CancellationToken


@dataclass(frozen=True)
class ChainConfig:
    """
    Args:
        steps: Instruction templates applied in order. Besides `{input}`
            (the running value), templates may reference `{original}`.
        timeout: Per-step timeout overriding the executor default
    """

    steps: Sequence[TemplateLike]
    timeout: float | None = None

    def __post_init__(self):
        object.__setattr__(self, "steps", coerce_templates(self.steps, "steps"))
        check_timeout(self.timeout)

    @property
    def templates(self) -> tuple[PromptTemplate, ...]:
        return self.steps  # type: ignore[return-value]


class ChainWorkflow(Workflow[ChainConfig]):
    """
    Strict left fold over the step templates.

    The first failed step ends the run: the result carries that step's
    error and the trace up to and including it.
    """

    pattern = "chain"

    async def _execute(self, input: str, cancellation_token: CancellationToken | None) -> WorkflowResult:
        trace: list[StepResult] = []
        current = input

        for index, template in enumerate(self.config.templates):
            self._checkpoint(cancellation_token)
            step = await self.executor.execute(
                template.render(current, original=input),
                self._step_timeout(),
                label=f"chain[{index}]",
            )
            trace.append(step)
            if not step.ok:
                return WorkflowResult(
                    output=None,
                    trace=tuple(trace),
                    error=step.error,
                    pattern=self.pattern,
                    metadata={"failed_step": index, "last_output": current if index else None},
                )
            current = step.text

        return WorkflowResult(output=current, trace=tuple(trace), pattern=self.pattern)


__all__ = ["ChainConfig", "ChainWorkflow"]

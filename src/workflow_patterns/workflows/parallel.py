"""Parallel topology: fixed fan-out of steps over one shared input."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..concurrency import gather_all
from ..prompts import PromptTemplate, TemplateLike
from ..types import WorkflowResult
from .base import Workflow, check_timeout, coerce_templates

if TYPE_CHECKING:
    from ..cancellation import CancellationToken


@dataclass(frozen=True)
class ParallelConfig:
    """
    Args:
        steps: Instruction templates, each run once against the same input.
            Templates may reference `{index}` (0-based branch position).
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


class ParallelWorkflow(Workflow[ParallelConfig]):
    """
    Runs every branch concurrently and collects each `StepResult` at its
    branch index. Failed branches do not abort the batch and the results
    are not combined; `output[i]` always answers `steps[i]`.
    """

    pattern = "parallel"

    async def _execute(self, input: str, cancellation_token: CancellationToken | None) -> WorkflowResult:
        timeout = self._step_timeout()
        factories = [
            lambda i=i, t=t: self.executor.execute(
                t.render(input, index=str(i)),
                timeout,
                label=f"parallel[{i}]",
            )
            for i, t in enumerate(self.config.templates)
        ]
        results = await gather_all(factories, cancellation_token=cancellation_token)

        return WorkflowResult(
            output=list(results),
            trace=tuple(results),
            pattern=self.pattern,
            metadata={"failed_branches": [i for i, r in enumerate(results) if not r.ok]},
        )


__all__ = ["ParallelConfig", "ParallelWorkflow"]

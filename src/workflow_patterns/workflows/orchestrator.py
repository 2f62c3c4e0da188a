"""
Orchestrator-workers topology.

A decomposition step splits the task into subtasks, one worker step runs
per subtask (concurrently, optionally bounded), and a combination step
merges the worker outputs in subtask order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..concurrency import gather_all
from ..config.execution import DEFAULT_FAILED_PLACEHOLDER
from ..errors import ErrorKind, InvalidConfigError
from ..parsing import LineSubtaskParser, SubtaskParser
from ..prompts import PromptTemplate, TemplateLike
from ..types import StepResult, Subtask, WorkflowResult
from .base import Workflow, check_timeout, coerce_template

if TYPE_CHECKING:
    from ..cancellation import CancellationToken


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Args:
        decomposer: Template turning the task into a list of subtasks.
        worker: Template applied to each subtask description. May reference
            `{task}` and `{subtask_id}`.
        combiner: Template applied to the assembled worker outputs. May
            reference `{task}`.
        max_concurrency: Maximum workers in flight (None = unbounded).
        subtask_parser: Rule splitting decomposition text into subtasks.
        failed_placeholder: Text standing in for a failed worker's output.
            May reference `{id}`, `{description}` and `{error}`.
        timeout: Per-step timeout overriding the executor default
    """

    decomposer: TemplateLike
    worker: TemplateLike
    combiner: TemplateLike
    max_concurrency: int | None = None
    subtask_parser: SubtaskParser = field(default_factory=LineSubtaskParser, compare=False)
    failed_placeholder: str = DEFAULT_FAILED_PLACEHOLDER
    timeout: float | None = None

    def __post_init__(self):
        for name in ("decomposer", "worker", "combiner"):
            object.__setattr__(self, name, coerce_template(getattr(self, name), name))
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise InvalidConfigError("max_concurrency must be at least 1", field_name="max_concurrency")
        if not isinstance(self.subtask_parser, SubtaskParser):
            raise InvalidConfigError("subtask_parser must define parse(text)", field_name="subtask_parser")
        check_timeout(self.timeout)


def format_worker_outputs(
    subtasks: list[Subtask],
    results: list[StepResult],
    failed_placeholder: str = DEFAULT_FAILED_PLACEHOLDER,
) -> str:
    """
    Assemble worker outputs into the combination step's input.

    Every subtask keeps its position; failed workers contribute the
    placeholder text so the remaining fragments stay attributed.
    """
    placeholder = PromptTemplate(failed_placeholder)
    sections = []
    for subtask, result in zip(subtasks, results):
        if result.ok:
            body = result.text
        else:
            body = placeholder.render(
                id=str(subtask.id),
                description=subtask.description,
                error=result.error.value,
            )
        sections.append(f"Subtask {subtask.id}: {subtask.description}\n{body}")
    return "\n\n".join(sections)


class OrchestratorWorkflow(Workflow[OrchestratorConfig]):
    """
    Decompose, fan out to workers, combine.

    - A failed decomposition fails the workflow.
    - A decomposition with no subtasks fails with
      `ErrorKind.EMPTY_DECOMPOSITION` and no worker runs.
    - Failed workers never abort the batch.
    - The combination step's outcome is the workflow's outcome.
    """

    pattern = "orchestrator"

    async def _execute(self, task: str, cancellation_token: CancellationToken | None) -> WorkflowResult:
        config = self.config
        timeout = self._step_timeout()
        trace: list[StepResult] = []

        self._checkpoint(cancellation_token)
        decomposition = await self.executor.execute(
            config.decomposer.render(task),  # type: ignore[union-attr]
            timeout,
            label="decompose",
        )
        trace.append(decomposition)
        if not decomposition.ok:
            return self._result(None, trace, decomposition.error, [])

        subtasks = config.subtask_parser.parse(decomposition.text)
        if not subtasks:
            self.executor.logger.warning("Decomposition produced no subtasks")
            return self._result(None, trace, ErrorKind.EMPTY_DECOMPOSITION, [])

        factories = [
            lambda s=s: self.executor.execute(
                config.worker.render(s.description, task=task, subtask_id=str(s.id)),  # type: ignore[union-attr]
                timeout,
                label=f"worker[{s.id}]",
            )
            for s in subtasks
        ]
        worker_results = await gather_all(
            factories,
            max_concurrency=config.max_concurrency,
            cancellation_token=cancellation_token,
        )
        trace.extend(worker_results)

        self._checkpoint(cancellation_token)
        combined_input = format_worker_outputs(subtasks, worker_results, config.failed_placeholder)
        combination = await self.executor.execute(
            config.combiner.render(combined_input, task=task),  # type: ignore[union-attr]
            timeout,
            label="combine",
        )
        trace.append(combination)

        return self._result(
            combination.text,
            trace,
            combination.error,
            subtasks,
            failed_workers=[s.id for s, r in zip(subtasks, worker_results) if not r.ok],
        )

    def _result(
        self,
        output: str | None,
        trace: list[StepResult],
        error: ErrorKind | None,
        subtasks: list[Subtask],
        failed_workers: list[int] | None = None,
    ) -> WorkflowResult:
        return WorkflowResult(
            output=output,
            trace=tuple(trace),
            error=error,
            pattern=self.pattern,
            metadata={
                "subtasks": [s.to_dict() for s in subtasks],
                "failed_workers": failed_workers or [],
            },
        )


__all__ = ["OrchestratorConfig", "OrchestratorWorkflow", "format_worker_outputs"]

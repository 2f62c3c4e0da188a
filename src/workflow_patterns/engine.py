"""
Workflow engine: one entry point per topology over a shared step executor.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from .completion import Completion, CompletionFn, OpenAICompletion
from .config import Settings, get_settings
from .errors import InvalidConfigError
from .hooks import Hook, HookManager
from .logging import StructuredLogger
from .parsing import EvaluationParser, ScoreEvaluationParser, SubtaskParser
from .prompts import TemplateLike
from .step import StepExecutor
from .types import WorkflowRequest, WorkflowResult
from .workflows import (
    WORKFLOWS,
    ChainConfig,
    EvaluatorOptimizerConfig,
    OrchestratorConfig,
    ParallelConfig,
    RouterConfig,
)

if TYPE_CHECKING:
    from .cancellation import CancellationToken


class WorkflowEngine:
    """
    Facade exposing the five topologies over one completion backend.

    Defaults for timeouts, worker concurrency and evaluation come from
    `Settings`; explicit arguments always win.

    Example:
        ```python
        engine = WorkflowEngine(OpenAICompletion(model="gpt-4o-mini"))
        result = await engine.run_chain(
            ["Extract the key claims:", "Rewrite them as bullet points:"],
            article_text,
        )
        print(result.output)
        ```
    """

    def __init__(
        self,
        completion: Completion | CompletionFn,
        *,
        settings: Settings | None = None,
        logger: StructuredLogger | None = None,
        hooks: HookManager | list[Hook] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        logger = logger or StructuredLogger.from_config(self.settings.logging)
        if isinstance(hooks, list):
            hooks = HookManager(hooks, logger=logger)
        self.executor = StepExecutor(
            completion,
            timeout=self.settings.step.timeout,
            logger=logger,
            hooks=hooks,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> WorkflowEngine:
        """Build an engine backed by `OpenAICompletion` configured from settings."""
        settings = settings or get_settings()
        return cls(OpenAICompletion.from_config(settings.openai), settings=settings, **kwargs)

    @property
    def hooks(self) -> HookManager:
        return self.executor.hooks

    async def run_chain(
        self,
        steps: Sequence[TemplateLike],
        input: str,
        *,
        timeout: float | None = None,
        cancellation_token: CancellationToken | None = None,
    ) -> WorkflowResult:
        """Run `steps` in order, feeding each step the previous output."""
        return await self.run(
            WorkflowRequest(input, ChainConfig(steps, timeout=timeout)),
            cancellation_token=cancellation_token,
        )

    async def run_parallel(
        self,
        steps: Sequence[TemplateLike],
        input: str,
        *,
        timeout: float | None = None,
        cancellation_token: CancellationToken | None = None,
    ) -> WorkflowResult:
        """Run every step concurrently on `input`; output[i] answers steps[i]."""
        return await self.run(
            WorkflowRequest(input, ParallelConfig(steps, timeout=timeout)),
            cancellation_token=cancellation_token,
        )

    async def run_router(
        self,
        classifier: TemplateLike,
        routes: Mapping[str, TemplateLike],
        default_route: TemplateLike,
        input: str,
        *,
        timeout: float | None = None,
        cancellation_token: CancellationToken | None = None,
    ) -> WorkflowResult:
        """Classify `input` and run the matching route, or the default route."""
        return await self.run(
            WorkflowRequest(input, RouterConfig(classifier, routes, default_route, timeout=timeout)),
            cancellation_token=cancellation_token,
        )

    async def run_orchestrator(
        self,
        decomposer: TemplateLike,
        worker: TemplateLike,
        combiner: TemplateLike,
        task: str,
        max_concurrency: int | None = None,
        *,
        subtask_parser: SubtaskParser | None = None,
        timeout: float | None = None,
        cancellation_token: CancellationToken | None = None,
    ) -> WorkflowResult:
        """Decompose `task`, run one worker per subtask, and combine the outputs."""
        workers = self.settings.workers
        options = {}
        if subtask_parser is not None:
            options["subtask_parser"] = subtask_parser
        config = OrchestratorConfig(
            decomposer,
            worker,
            combiner,
            max_concurrency=max_concurrency if max_concurrency is not None else workers.max_concurrency,
            failed_placeholder=workers.failed_placeholder,
            timeout=timeout,
            **options,
        )
        return await self.run(WorkflowRequest(task, config), cancellation_token=cancellation_token)

    async def run_evaluator_optimizer(
        self,
        generator: TemplateLike,
        evaluator: TemplateLike,
        refiner: TemplateLike,
        task: str,
        threshold: float | None = None,
        max_iterations: int | None = None,
        *,
        evaluation_parser: EvaluationParser | None = None,
        timeout: float | None = None,
        cancellation_token: CancellationToken | None = None,
    ) -> WorkflowResult:
        """Generate, then evaluate and refine until `threshold` or `max_iterations`."""
        evaluation = self.settings.evaluation
        config = EvaluatorOptimizerConfig(
            generator,
            evaluator,
            refiner,
            threshold=evaluation.threshold if threshold is None else threshold,
            max_iterations=evaluation.max_iterations if max_iterations is None else max_iterations,
            evaluation_parser=evaluation_parser
            or ScoreEvaluationParser(evaluation.score_min, evaluation.score_max),
            timeout=timeout,
        )
        return await self.run(WorkflowRequest(task, config), cancellation_token=cancellation_token)

    async def run(
        self,
        request: WorkflowRequest,
        *,
        cancellation_token: CancellationToken | None = None,
    ) -> WorkflowResult:
        """Run a prepared request with the topology matching its config type."""
        workflow_cls = WORKFLOWS.get(type(request.config))
        if workflow_cls is None:
            raise InvalidConfigError(
                f"No workflow accepts config of type {type(request.config).__name__}",
                field_name="config",
            )
        workflow = workflow_cls(self.executor, request.config)
        return await workflow.run(request.input, cancellation_token=cancellation_token)


__all__ = ["WorkflowEngine"]

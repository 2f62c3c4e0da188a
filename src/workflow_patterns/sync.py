"""Thin sync wrappers for the async-first engine.

For scripts and notebooks-turned-scripts where no event loop is running.
Each wrapper raises RuntimeError inside an active event loop and points
to the async method instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Mapping, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from .engine import WorkflowEngine
    from .prompts import TemplateLike
    from .types import WorkflowResult

T = TypeVar("T")


def _run(coro: Coroutine[Any, Any, T], name: str) -> T:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    coro.close()
    raise RuntimeError(
        f"{name}_sync() cannot be called inside an async context. "
        f"Use 'await engine.{name}()' instead."
    )


def run_chain_sync(engine: WorkflowEngine, steps: Sequence[TemplateLike], input: str, **kwargs) -> WorkflowResult:
    """Sync wrapper for WorkflowEngine.run_chain."""
    return _run(engine.run_chain(steps, input, **kwargs), "run_chain")


def run_parallel_sync(engine: WorkflowEngine, steps: Sequence[TemplateLike], input: str, **kwargs) -> WorkflowResult:
    """Sync wrapper for WorkflowEngine.run_parallel."""
    return _run(engine.run_parallel(steps, input, **kwargs), "run_parallel")


def run_router_sync(
    engine: WorkflowEngine,
    classifier: TemplateLike,
    routes: Mapping[str, TemplateLike],
    default_route: TemplateLike,
    input: str,
    **kwargs,
) -> WorkflowResult:
    """Sync wrapper for WorkflowEngine.run_router."""
    return _run(engine.run_router(classifier, routes, default_route, input, **kwargs), "run_router")


def run_orchestrator_sync(
    engine: WorkflowEngine,
    decomposer: TemplateLike,
    worker: TemplateLike,
    combiner: TemplateLike,
    task: str,
    max_concurrency: int | None = None,
    **kwargs,
) -> WorkflowResult:
    """Sync wrapper for WorkflowEngine.run_orchestrator."""
    return _run(
        engine.run_orchestrator(decomposer, worker, combiner, task, max_concurrency, **kwargs),
        "run_orchestrator",
    )


def run_evaluator_optimizer_sync(
    engine: WorkflowEngine,
    generator: TemplateLike,
    evaluator: TemplateLike,
    refiner: TemplateLike,
    task: str,
    threshold: float | None = None,
    max_iterations: int | None = None,
    **kwargs,
) -> WorkflowResult:
    """Sync wrapper for WorkflowEngine.run_evaluator_optimizer."""
    return _run(
        engine.run_evaluator_optimizer(generator, evaluator, refiner, task, threshold, max_iterations, **kwargs),
        "run_evaluator_optimizer",
    )


__all__ = [
    "run_chain_sync",
    "run_parallel_sync",
    "run_router_sync",
    "run_orchestrator_sync",
    "run_evaluator_optimizer_sync",
]

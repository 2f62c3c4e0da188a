"""
Execution defaults for steps and topologies.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_FAILED_PLACEHOLDER = "[subtask {id} failed: {error}]"


@dataclass
class StepConfig:
    """Configuration for single completion steps."""

    # Per-call timeout in seconds
    timeout: float = 60.0

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


@dataclass
class WorkerPoolConfig:
    """Defaults for orchestrator-workers fan-out."""

    # None means every worker is dispatched at once
    max_concurrency: int | None = None
    failed_placeholder: str = DEFAULT_FAILED_PLACEHOLDER

    def __post_init__(self):
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")


@dataclass
class EvaluationConfig:
    """Defaults for evaluator-optimizer loops."""

    threshold: float = 8.0
    max_iterations: int = 3
    score_min: float = 0.0
    score_max: float = 10.0

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if self.score_min >= self.score_max:
            raise ValueError("score_min must be lower than score_max")
        if not self.score_min <= self.threshold <= self.score_max:
            raise ValueError("threshold must lie within the score range")


__all__ = [
    "DEFAULT_FAILED_PLACEHOLDER",
    "StepConfig",
    "WorkerPoolConfig",
    "EvaluationConfig",
]

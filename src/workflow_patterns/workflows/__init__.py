"""
The five workflow topologies.

Each topology pairs a frozen config dataclass with a `Workflow` subclass
that drives a shared `StepExecutor`. The topologies are independent of
each other.
"""

from .base import Workflow
from .chain import ChainConfig, ChainWorkflow
from .evaluator import EvaluatorOptimizerConfig, EvaluatorOptimizerWorkflow
from .orchestrator import OrchestratorConfig, OrchestratorWorkflow, format_worker_outputs
from .parallel import ParallelConfig, ParallelWorkflow
from .router import DEFAULT_ROUTE, RouterConfig, RouterWorkflow, normalize_label

WORKFLOWS: dict[type, type[Workflow]] = {
    ChainConfig: ChainWorkflow,
    ParallelConfig: ParallelWorkflow,
    RouterConfig: RouterWorkflow,
    OrchestratorConfig: OrchestratorWorkflow,
    EvaluatorOptimizerConfig: EvaluatorOptimizerWorkflow,
}

__all__ = [
    "Workflow",
    "WORKFLOWS",
    "ChainConfig",
    "ChainWorkflow",
    "ParallelConfig",
    "ParallelWorkflow",
    "RouterConfig",
    "RouterWorkflow",
    "DEFAULT_ROUTE",
    "normalize_label",
    "OrchestratorConfig",
    "OrchestratorWorkflow",
    "format_worker_outputs",
    "EvaluatorOptimizerConfig",
    "EvaluatorOptimizerWorkflow",
]

"""
Top-level package for workflow-patterns.

Composes calls to a text-completion backend into five fixed topologies:
chain, parallel, router, orchestrator-workers and evaluator-optimizer.

Environment variables are loaded from the nearest `.env` on import so
provider keys and `WORKFLOW_*` settings are picked up.
"""
from dotenv import find_dotenv, load_dotenv

_ = load_dotenv(find_dotenv(usecwd=True), override=False)

from .cancellation import CancellationToken, CancelledError
from .completion import CallableCompletion, Completion, OpenAICompletion, as_completion
from .config import Settings, configure, get_settings
from .engine import WorkflowEngine
from .errors import (
    CompletionError,
    CompletionTimeoutError,
    ConfigError,
    EmptyDecompositionError,
    ErrorKind,
    InvalidConfigError,
    ProviderFailureError,
    WorkflowError,
)
from .hooks import HookManager, InMemoryMetricsHook
from .parsing import (
    DelimiterSubtaskParser,
    LineSubtaskParser,
    ScoreEvaluationParser,
    TagSubtaskParser,
)
from .prompts import PromptTemplate
from .step import StepExecutor
from .types import Evaluation, StepResult, Subtask, WorkflowRequest, WorkflowResult
from .workflows import (
    ChainConfig,
    ChainWorkflow,
    EvaluatorOptimizerConfig,
    EvaluatorOptimizerWorkflow,
    OrchestratorConfig,
    OrchestratorWorkflow,
    ParallelConfig,
    ParallelWorkflow,
    RouterConfig,
    RouterWorkflow,
)

__all__ = [
    "WorkflowEngine",
    "StepExecutor",
    # Completion backends
    "Completion",
    "CallableCompletion",
    "OpenAICompletion",
    "as_completion",
    # Values
    "PromptTemplate",
    "StepResult",
    "Subtask",
    "Evaluation",
    "WorkflowRequest",
    "WorkflowResult",
    # Topologies
    "ChainConfig",
    "ChainWorkflow",
    "ParallelConfig",
    "ParallelWorkflow",
    "RouterConfig",
    "RouterWorkflow",
    "OrchestratorConfig",
    "OrchestratorWorkflow",
    "EvaluatorOptimizerConfig",
    "EvaluatorOptimizerWorkflow",
    # Parsing
    "LineSubtaskParser",
    "DelimiterSubtaskParser",
    "TagSubtaskParser",
    "ScoreEvaluationParser",
    # Errors
    "ErrorKind",
    "WorkflowError",
    "CompletionError",
    "CompletionTimeoutError",
    "ProviderFailureError",
    "EmptyDecompositionError",
    "ConfigError",
    "InvalidConfigError",
    # Cancellation & hooks
    "CancellationToken",
    "CancelledError",
    "HookManager",
    "InMemoryMetricsHook",
    # Settings
    "Settings",
    "get_settings",
    "configure",
]

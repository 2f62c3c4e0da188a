"""
Error taxonomy for workflow-patterns.

Two layers live here:
- `ErrorKind`: the failure kinds carried as *data* on step and workflow
  results. Step failures are never raised to callers of a workflow.
- `WorkflowError` and subclasses: exceptions raised by completion
  backends (and normalized by the step executor) or by invalid
  configuration supplied by the caller.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure kinds recorded on `StepResult` / `WorkflowResult`."""

    TIMEOUT = "timeout"
    PROVIDER_FAILURE = "provider_failure"
    EMPTY_DECOMPOSITION = "empty_decomposition"

    @classmethod
    def from_exception(cls, error: BaseException) -> ErrorKind:
        """Map an exception raised by a completion call to an error kind."""
        if isinstance(error, WorkflowError) and error.kind is not None:
            return error.kind
        if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
            return cls.TIMEOUT
        return cls.PROVIDER_FAILURE


class ErrorCode(str, Enum):
    """Standardized error codes for programmatic handling."""

    # Completion errors (1xxx)
    COMPLETION_ERROR = "ERR_1000"
    COMPLETION_TIMEOUT = "ERR_1001"
    PROVIDER_FAILURE = "ERR_1002"

    # Workflow errors (2xxx)
    WORKFLOW_ERROR = "ERR_2000"
    EMPTY_DECOMPOSITION = "ERR_2001"

    # Configuration errors (6xxx)
    CONFIG_ERROR = "ERR_6000"
    INVALID_CONFIG = "ERR_6001"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "ERR_9000"


@dataclass
class ErrorContext:
    """Structured context for error debugging."""

    trace_id: str | None = None
    pattern: str | None = None
    step: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "trace_id": self.trace_id,
            "pattern": self.pattern,
            "step": self.step,
            **self.extra,
        }


class WorkflowError(Exception):
    """
    Base exception for all workflow-patterns errors.

    Attributes:
        code: Standardized error code for programmatic handling
        kind: Step error kind this exception maps to, if any
        message: Human-readable error message
        retryable: Whether the operation can be retried
        context: Structured debugging context
        cause: Original exception that caused this error
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    kind: ErrorKind | None = None
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if retryable is not None:
            self.retryable = retryable
        self.context = context or ErrorContext()
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.context.step:
            parts.append(f"(step={self.context.step})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code.value,
            "kind": self.kind.value if self.kind else None,
            "message": self.message,
            "retryable": self.retryable,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# =============================================================================
# Completion Errors
# =============================================================================


class CompletionError(WorkflowError):
    """Base class for errors raised by a completion backend."""

    code = ErrorCode.COMPLETION_ERROR
    kind = ErrorKind.PROVIDER_FAILURE


class CompletionTimeoutError(CompletionError):
    """The completion call did not finish within its timeout."""

    code = ErrorCode.COMPLETION_TIMEOUT
    kind = ErrorKind.TIMEOUT
    retryable = True

    def __init__(
        self,
        message: str = "Completion timed out",
        *,
        timeout: float | None = None,
        **kwargs,
    ):
        if timeout is not None and message == "Completion timed out":
            message = f"Completion timed out after {timeout}s"
        super().__init__(message, **kwargs)
        self.timeout = timeout


class ProviderFailureError(CompletionError):
    """The completion backend failed to produce a response."""

    code = ErrorCode.PROVIDER_FAILURE
    kind = ErrorKind.PROVIDER_FAILURE

    def __init__(
        self,
        message: str = "Completion provider failed",
        *,
        status: int | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.status = status


# =============================================================================
# Workflow Errors
# =============================================================================


class EmptyDecompositionError(WorkflowError):
    """A decomposition produced no subtasks."""

    code = ErrorCode.EMPTY_DECOMPOSITION
    kind = ErrorKind.EMPTY_DECOMPOSITION


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(WorkflowError):
    """Base class for configuration errors."""

    code = ErrorCode.CONFIG_ERROR


class InvalidConfigError(ConfigError, ValueError):
    """A workflow or settings value is invalid."""

    code = ErrorCode.INVALID_CONFIG

    def __init__(
        self,
        message: str = "Invalid configuration",
        *,
        field_name: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.field_name = field_name


def is_retryable(error: BaseException) -> bool:
    """
    Check if an error is retryable.

    Non-`WorkflowError` timeouts are treated as retryable; anything else
    unknown is not.
    """
    if isinstance(error, WorkflowError):
        return error.retryable
    return isinstance(error, (asyncio.TimeoutError, TimeoutError))


__all__ = [
    "ErrorKind",
    "ErrorCode",
    "ErrorContext",
    "WorkflowError",
    "CompletionError",
    "CompletionTimeoutError",
    "ProviderFailureError",
    "EmptyDecompositionError",
    "ConfigError",
    "InvalidConfigError",
    "is_retryable",
]

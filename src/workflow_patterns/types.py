"""
Result and value types shared by every workflow topology.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from blake3 import blake3

from .errors import (
    CompletionTimeoutError,
    EmptyDecompositionError,
    ErrorContext,
    ErrorKind,
    ProviderFailureError,
)
from .serialization import stable_json_dumps


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of one completion invocation.

    Exactly one of `text` / `error` is populated. `duration_ms` is
    informational and excluded from equality.
    """

    text: str | None = None
    error: ErrorKind | None = None
    label: str = ""
    message: str | None = None
    duration_ms: float = field(default=0.0, compare=False)

    def __post_init__(self):
        if (self.text is None) == (self.error is None):
            raise ValueError("StepResult requires exactly one of text or error")

    @classmethod
    def success(cls, text: str, *, label: str = "", duration_ms: float = 0.0) -> StepResult:
        return cls(text=text, label=label, duration_ms=duration_ms)

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        *,
        label: str = "",
        message: str | None = None,
        duration_ms: float = 0.0,
    ) -> StepResult:
        return cls(error=error, label=label, message=message, duration_ms=duration_ms)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "text": self.text,
            "error": self.error.value if self.error else None,
            "message": self.message,
        }


@dataclass(frozen=True)
class Subtask:
    """One unit of work produced by a decomposition step."""

    id: int
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "description": self.description}


@dataclass(frozen=True)
class Evaluation:
    """Parsed outcome of one evaluation step."""

    score: float
    feedback: str
    passed: bool
    parsed: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "feedback": self.feedback,
            "passed": self.passed,
            "parsed": self.parsed,
        }


@dataclass(frozen=True)
class WorkflowRequest:
    """Caller-owned input plus the pattern-specific configuration to run it with."""

    input: str
    config: Any


@dataclass(frozen=True)
class WorkflowResult:
    """
    Final result of one workflow run.

    `output` is a string for single-answer topologies and a list of
    `StepResult` (one per configured step, in step order) for the
    parallel topology. `trace` holds every completion invocation in the
    order it was issued, including failed ones.
    """

    output: str | list[StepResult] | None
    trace: tuple[StepResult, ...] = ()
    error: ErrorKind | None = None
    pattern: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def num_steps(self) -> int:
        return len(self.trace)

    @property
    def failed_steps(self) -> list[StepResult]:
        return [step for step in self.trace if not step.ok]

    def raise_for_error(self) -> WorkflowResult:
        """
        Raise the exception matching `error`, or return self when the run succeeded.

        Raises:
            CompletionTimeoutError, ProviderFailureError, EmptyDecompositionError
        """
        if self.error is None:
            return self

        failed = next((s for s in reversed(self.trace) if not s.ok), None)
        context = ErrorContext(pattern=self.pattern, step=failed.label if failed else None)
        message = failed.message if failed and failed.message else f"{self.pattern} workflow failed"
        if self.error is ErrorKind.TIMEOUT:
            raise CompletionTimeoutError(message, context=context)
        if self.error is ErrorKind.EMPTY_DECOMPOSITION:
            raise EmptyDecompositionError("Decomposition produced no subtasks", context=context)
        raise ProviderFailureError(message, context=context)

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.output, list):
            output: Any = [item.to_dict() for item in self.output]
        else:
            output = self.output
        return {
            "pattern": self.pattern,
            "output": output,
            "error": self.error.value if self.error else None,
            "trace": [step.to_dict() for step in self.trace],
            "metadata": self.metadata,
        }

    def fingerprint(self) -> str:
        """Stable hash of the result, trace order included and timings excluded."""
        return blake3(stable_json_dumps(self.to_dict()).encode("utf-8")).hexdigest()


__all__ = ["StepResult", "Subtask", "Evaluation", "WorkflowRequest", "WorkflowResult"]

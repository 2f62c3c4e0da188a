"""Tests for result value types."""

from __future__ import annotations

import pytest

from workflow_patterns.errors import (
    CompletionTimeoutError,
    EmptyDecompositionError,
    ErrorKind,
    ProviderFailureError,
)
from workflow_patterns.types import StepResult, WorkflowResult


class TestStepResult:
    def test_exactly_one_of_text_or_error(self):
        with pytest.raises(ValueError):
            StepResult()
        with pytest.raises(ValueError):
            StepResult(text="x", error=ErrorKind.TIMEOUT)

    def test_empty_text_is_success(self):
        assert StepResult.success("").ok

    def test_duration_excluded_from_equality(self):
        a = StepResult.success("x", label="s", duration_ms=1.0)
        b = StepResult.success("x", label="s", duration_ms=250.0)
        assert a == b

    def test_to_dict(self):
        result = StepResult.failure(ErrorKind.TIMEOUT, label="chain[1]", message="slow")
        assert result.to_dict() == {
            "label": "chain[1]",
            "text": None,
            "error": "timeout",
            "message": "slow",
        }


class TestWorkflowResult:
    def test_failed_steps(self):
        trace = (
            StepResult.success("a"),
            StepResult.failure(ErrorKind.PROVIDER_FAILURE, label="worker[2]"),
        )
        result = WorkflowResult(output="done", trace=trace, pattern="orchestrator")

        assert result.ok
        assert result.num_steps == 2
        assert [s.label for s in result.failed_steps] == ["worker[2]"]

    def test_fingerprint_ignores_timings(self):
        first = WorkflowResult("x", (StepResult.success("x", duration_ms=3.0),), pattern="chain")
        second = WorkflowResult("x", (StepResult.success("x", duration_ms=90.0),), pattern="chain")
        assert first.fingerprint() == second.fingerprint()

    def test_fingerprint_tracks_content(self):
        first = WorkflowResult("x", (StepResult.success("x"),), pattern="chain")
        second = WorkflowResult("y", (StepResult.success("y"),), pattern="chain")
        assert first.fingerprint() != second.fingerprint()

    def test_to_dict_with_list_output(self):
        items = [StepResult.success("a", label="parallel[0]")]
        data = WorkflowResult(items, tuple(items), pattern="parallel").to_dict()
        assert data["output"] == [{"label": "parallel[0]", "text": "a", "error": None, "message": None}]

    def test_raise_for_error_success_returns_self(self):
        result = WorkflowResult("x", pattern="chain")
        assert result.raise_for_error() is result

    def test_raise_for_error_timeout(self):
        failed = StepResult.failure(ErrorKind.TIMEOUT, label="chain[0]", message="Step timed out after 1s")
        result = WorkflowResult(None, (failed,), error=ErrorKind.TIMEOUT, pattern="chain")

        with pytest.raises(CompletionTimeoutError) as exc_info:
            result.raise_for_error()
        assert exc_info.value.message == "Step timed out after 1s"
        assert exc_info.value.context.step == "chain[0]"
        assert exc_info.value.context.pattern == "chain"

    def test_raise_for_error_provider_failure(self):
        failed = StepResult.failure(ErrorKind.PROVIDER_FAILURE, label="classify")
        result = WorkflowResult(None, (failed,), error=ErrorKind.PROVIDER_FAILURE, pattern="router")

        with pytest.raises(ProviderFailureError, match="router workflow failed"):
            result.raise_for_error()

    def test_raise_for_error_empty_decomposition(self):
        result = WorkflowResult(
            None,
            (StepResult.success("", label="decompose"),),
            error=ErrorKind.EMPTY_DECOMPOSITION,
            pattern="orchestrator",
        )

        with pytest.raises(EmptyDecompositionError):
            result.raise_for_error()

"""
Shared fixtures for workflow-patterns tests.
"""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest

from workflow_patterns.config import Settings, reset_settings
from workflow_patterns.engine import WorkflowEngine
from workflow_patterns.hooks import HookManager, InMemoryMetricsHook
from workflow_patterns.logging import StructuredLogger
from workflow_patterns.step import StepExecutor


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep WORKFLOW_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("WORKFLOW_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    return StructuredLogger("workflow_patterns.tests", level="ERROR")


@pytest.fixture
def metrics() -> InMemoryMetricsHook:
    return InMemoryMetricsHook()


@pytest.fixture
def make_executor(quiet_logger, metrics) -> Callable[..., StepExecutor]:
    def _factory(completion, timeout: float | None = 1.0) -> StepExecutor:
        return StepExecutor(
            completion,
            timeout=timeout,
            logger=quiet_logger,
            hooks=HookManager([metrics]),
        )

    return _factory


@pytest.fixture
def make_engine(quiet_logger, metrics) -> Callable[..., WorkflowEngine]:
    def _factory(completion, settings: Settings | None = None) -> WorkflowEngine:
        return WorkflowEngine(
            completion,
            settings=settings or Settings(),
            logger=quiet_logger,
            hooks=[metrics],
        )

    return _factory

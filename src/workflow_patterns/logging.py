"""
Structured logging for workflow-patterns.

This module provides:
- Structured JSON or text logging with consistent fields
- Per-step and per-workflow log records with trace correlation
- Timing helpers
"""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import LoggingConfig


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Log Record Types
# =============================================================================


@dataclass
class LogContext:
    """Context information attached to log records."""

    trace_id: str | None = None
    pattern: str | None = None
    step: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        known = {"trace_id": self.trace_id, "pattern": self.pattern, "step": self.step}
        return {**{k: v for k, v in known.items() if v is not None}, **self.extra}

    def with_update(self, **kwargs) -> LogContext:
        """Copy of this context; unknown keys land in `extra`."""
        known = {name: kwargs.pop(name, getattr(self, name)) for name in ("trace_id", "pattern", "step")}
        extra = {**self.extra, **kwargs.pop("extra", {}), **kwargs}
        return LogContext(**known, extra=extra)


@dataclass
class StepLog:
    """Log record for one completion step."""

    label: str
    success: bool = True
    error: str | None = None
    message: str | None = None

    timestamp: str = field(default_factory=lambda: _utcnow().isoformat())
    duration_ms: float | None = None

    prompt_chars: int = 0
    output_chars: int = 0
    prompt_preview: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class WorkflowLog:
    """Log record for a finished workflow run."""

    pattern: str
    steps: int = 0
    failed_steps: int = 0
    success: bool = True
    error: str | None = None

    timestamp: str = field(default_factory=lambda: _utcnow().isoformat())
    duration_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


# =============================================================================
# Structured Logger
# =============================================================================


class StructuredLogger:
    """
    Logger with structured output and trace correlation.

    Example:
        ```python
        logger = StructuredLogger("workflow_patterns")

        with logger.trace_context(pattern="chain"):
            logger.log_step(StepLog(label="chain[0]", duration_ms=12.0))
            logger.log_workflow(WorkflowLog(pattern="chain", steps=1))
        ```
    """

    def __init__(
        self,
        name: str = "workflow_patterns",
        level: str = "INFO",
        json_output: bool = False,
        log_prompts: bool = False,
    ):
        self.name = name
        self.json_output = json_output
        self.log_prompts = log_prompts

        self._logger = logging.getLogger(name)
        self._logger.setLevel(getattr(logging, level.upper()))

        # Per-task context so concurrent workflow runs do not share trace fields.
        self._context_var: ContextVar[LogContext] = ContextVar(f"{name}_log_context", default=LogContext())

        # Configure handler if not already configured
        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JSONFormatter() if json_output else TextFormatter())
            self._logger.addHandler(handler)

    @classmethod
    def from_config(cls, config: LoggingConfig, name: str = "workflow_patterns") -> StructuredLogger:
        """Create a logger from the logging section of the settings."""
        return cls(
            name,
            level=config.level,
            json_output=config.format == "json",
            log_prompts=config.log_prompts,
        )

    @property
    def context(self) -> LogContext:
        return self._context_var.get()

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def set_context(self, **kwargs) -> None:
        """Update the current log context."""
        self._context_var.set(self.context.with_update(**kwargs))

    @contextmanager
    def trace_context(
        self,
        trace_id: str | None = None,
        **kwargs,
    ) -> Iterator[str]:
        """
        Context manager for trace correlation.

        Args:
            trace_id: Trace ID (auto-generated if not provided)
            **kwargs: Additional context fields

        Yields:
            The trace ID
        """
        trace_id = trace_id or generate_trace_id()
        token = self._context_var.set(self.context.with_update(trace_id=trace_id, **kwargs))
        try:
            yield trace_id
        finally:
            self._context_var.reset(token)

    def _log(
        self,
        level: int,
        message: str,
        event_type: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return

        record_data = {
            "message": message,
            **self.context.to_dict(),
        }
        if event_type:
            record_data["event_type"] = event_type
        if data:
            record_data.update(data)

        if self.json_output:
            self._logger.log(level, json.dumps(record_data, default=str))
        else:
            extras = " ".join(f"{k}={v}" for k, v in record_data.items() if k != "message")
            self._logger.log(level, f"{message} {extras}".rstrip())

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, data=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, data=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, data=kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, data=kwargs)

    def log_step(self, step: StepLog) -> None:
        """Log one completion step."""
        level = logging.INFO if step.success else logging.WARNING
        message = f"Step '{step.label}' {'completed' if step.success else 'failed'}"
        if step.duration_ms is not None:
            message += f" ({step.duration_ms:.0f}ms)"
        if not self.log_prompts:
            step.prompt_preview = None
        self._log(level, message, event_type="step", data=step.to_dict())

    def log_workflow(self, workflow: WorkflowLog) -> None:
        """Log a finished workflow run."""
        level = logging.INFO if workflow.success else logging.WARNING
        message = f"Workflow '{workflow.pattern}' finished with {workflow.steps} step(s)"
        self._log(level, message, event_type="workflow", data=workflow.to_dict())


# =============================================================================
# Formatters
# =============================================================================


class JSONFormatter(logging.Formatter):
    """One JSON object per record; structured messages are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        try:
            payload = json.loads(message)
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            payload = {"message": message}

        entry = {
            "timestamp": _utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            **payload,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line formatter: time, level, message."""

    COLORS = {"DEBUG": "36", "INFO": "32", "WARNING": "33", "ERROR": "31", "CRITICAL": "35"}

    def __init__(self, colors: bool = True) -> None:
        super().__init__()
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        code = self.COLORS.get(record.levelname) if self.colors else None
        if code:
            level = f"\033[{code}m{level}\033[0m"

        line = f"{self.formatTime(record, '%H:%M:%S')}.{int(record.msecs):03d} {level} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


# =============================================================================
# Utilities
# =============================================================================


def generate_trace_id() -> str:
    """Generate a unique trace ID."""
    return f"trace_{uuid.uuid4().hex[:16]}"


def truncate_for_log(text: str, max_length: int = 200) -> str:
    """Shorten `text` for log output, noting the original length."""
    if len(text) > max_length:
        return f"{text[:max_length]}... ({len(text)} chars total)"
    return text


class Timer:
    """Monotonic stopwatch reporting milliseconds."""

    __slots__ = ("_start", "_end")

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._end: float | None = None

    def stop(self) -> float:
        """Stop the timer (once) and return the elapsed milliseconds."""
        if self._end is None:
            self._end = time.perf_counter()
        return self.elapsed_ms

    @property
    def stopped(self) -> bool:
        return self._end is not None

    @property
    def elapsed_ms(self) -> float:
        end = self._end if self._end is not None else time.perf_counter()
        return (end - self._start) * 1000.0


@contextmanager
def timed() -> Iterator[Timer]:
    """Time the enclosed block; the timer is stopped on exit."""
    timer = Timer()
    try:
        yield timer
    finally:
        timer.stop()


# =============================================================================
# Shared Logger
# =============================================================================

_default_logger: StructuredLogger | None = None


def get_logger(name: str = "workflow_patterns") -> StructuredLogger:
    """Get or create the shared structured logger."""
    global _default_logger
    if _default_logger is None or _default_logger.name != name:
        _default_logger = StructuredLogger(name)
    return _default_logger


def configure_logging(config: LoggingConfig | None = None, **kwargs: Any) -> StructuredLogger:
    """
    Configure the shared logger.

    Args:
        config: Logging section of the settings; keyword arguments override it
    """
    global _default_logger
    options: dict[str, Any] = {}
    if config is not None:
        options = {
            "level": config.level,
            "json_output": config.format == "json",
            "log_prompts": config.log_prompts,
        }
    options.update(kwargs)
    logger = StructuredLogger(**options)
    # Handlers outlive StructuredLogger instances; keep the formatter current.
    for handler in logger.logger.handlers:
        handler.setFormatter(JSONFormatter() if logger.json_output else TextFormatter())
    _default_logger = logger
    return _default_logger


__all__ = [
    "LogContext",
    "StepLog",
    "WorkflowLog",
    "StructuredLogger",
    "JSONFormatter",
    "TextFormatter",
    "Timer",
    "timed",
    "generate_trace_id",
    "truncate_for_log",
    "get_logger",
    "configure_logging",
]

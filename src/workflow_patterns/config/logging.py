"""
Logging configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import get_args

from .base import LogFormat, LogLevel


@dataclass
class LoggingConfig:
    """Level, output format and prompt-preview switch for the structured logger."""

    level: LogLevel = "INFO"
    format: LogFormat = "text"

    # Include a truncated prompt preview in step records
    log_prompts: bool = False

    def __post_init__(self):
        for name, allowed in (("level", get_args(LogLevel)), ("format", get_args(LogFormat))):
            value = getattr(self, name)
            if value not in allowed:
                raise ValueError(f"logging.{name} must be one of {allowed}, got {value!r}")


__all__ = ["LoggingConfig"]

"""
Configuration system for workflow-patterns.

This package provides typed configuration classes with:
- Dataclass-based settings with validation
- Environment variable loading
- YAML/TOML file loading validated against a JSON schema
"""

from .base import LogFormat, LogLevel
from .execution import DEFAULT_FAILED_PLACEHOLDER, EvaluationConfig, StepConfig, WorkerPoolConfig
from .logging import LoggingConfig
from .provider import OpenAIConfig
from .settings import Settings, configure, get_settings, load_env, reset_settings

__all__ = [
    # Types
    "LogLevel",
    "LogFormat",
    # Sections
    "DEFAULT_FAILED_PLACEHOLDER",
    "StepConfig",
    "WorkerPoolConfig",
    "EvaluationConfig",
    "LoggingConfig",
    "OpenAIConfig",
    # Master config
    "Settings",
    # Global functions
    "get_settings",
    "configure",
    "reset_settings",
    "load_env",
]

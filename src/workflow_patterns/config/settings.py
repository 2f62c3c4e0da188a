"""
Settings master configuration and global helpers.
"""

from __future__ import annotations

import dataclasses
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import jsonschema
import yaml
from dotenv import find_dotenv, load_dotenv

from ..config_schema import CONFIG_SCHEMA
from ..errors import InvalidConfigError
from .execution import EvaluationConfig, StepConfig, WorkerPoolConfig
from .logging import LoggingConfig
from .provider import OpenAIConfig


def _read_yaml(path: Path) -> dict[str, Any]:
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def _read_toml(path: Path) -> dict[str, Any]:
    return tomllib.loads(path.read_text(encoding="utf-8"))


_FILE_READERS = {".yaml": _read_yaml, ".yml": _read_yaml, ".toml": _read_toml}


def _env_number(name: str, convert: Callable[[str], Any], field_name: str) -> Any:
    """Read and convert a numeric environment variable; None when unset or empty."""
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return convert(raw)
    except ValueError as e:
        raise InvalidConfigError(
            f"Environment variable {name} must be a {convert.__name__}, got {raw!r}",
            field_name=field_name,
            cause=e,
        ) from e


@dataclass
class Settings:
    """
    Master configuration for the workflow engine.

    Aggregates all configuration sections into a single object that can be
    loaded from environment variables, files, or constructed
    programmatically.
    """

    step: StepConfig = field(default_factory=StepConfig)
    workers: WorkerPoolConfig = field(default_factory=WorkerPoolConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)

    @classmethod
    def from_env(cls, prefix: str = "WORKFLOW_") -> Settings:
        """
        Load settings from environment variables.

        Example:
            WORKFLOW_STEP_TIMEOUT=30
            WORKFLOW_MAX_CONCURRENCY=4
            WORKFLOW_EVAL_THRESHOLD=7.5
            WORKFLOW_LOG_FORMAT=json
        """
        data: dict[str, dict[str, Any]] = {
            "step": {},
            "workers": {},
            "evaluation": {},
            "logging": {},
            "openai": {},
        }

        numeric = (
            ("STEP_TIMEOUT", "step", "timeout", float),
            ("MAX_CONCURRENCY", "workers", "max_concurrency", int),
            ("EVAL_THRESHOLD", "evaluation", "threshold", float),
            ("EVAL_MAX_ITERATIONS", "evaluation", "max_iterations", int),
            ("EVAL_SCORE_MIN", "evaluation", "score_min", float),
            ("EVAL_SCORE_MAX", "evaluation", "score_max", float),
        )
        for suffix, section, name, convert in numeric:
            value = _env_number(f"{prefix}{suffix}", convert, f"{section}.{name}")
            if value is not None:
                data[section][name] = value

        if placeholder := os.getenv(f"{prefix}FAILED_PLACEHOLDER"):
            data["workers"]["failed_placeholder"] = placeholder

        if level := os.getenv(f"{prefix}LOG_LEVEL"):
            data["logging"]["level"] = level.upper()
        if log_format := os.getenv(f"{prefix}LOG_FORMAT"):
            data["logging"]["format"] = log_format.lower()
        if log_prompts := os.getenv(f"{prefix}LOG_PROMPTS"):
            data["logging"]["log_prompts"] = log_prompts.lower() == "true"

        if key := os.getenv(f"{prefix}OPENAI_API_KEY"):
            data["openai"]["api_key"] = key
        if url := os.getenv(f"{prefix}OPENAI_BASE_URL"):
            data["openai"]["base_url"] = url
        if model := os.getenv(f"{prefix}OPENAI_MODEL"):
            data["openai"]["model"] = model

        return cls._from_dict(data, validate=False)

    @classmethod
    def from_file(cls, path: str | Path) -> Settings:
        """
        Load settings from a YAML or TOML file.

        Args:
            path: Path to configuration file (.yaml, .yml, or .toml)

        Raises:
            FileNotFoundError: If the file does not exist
            InvalidConfigError: If the content violates the configuration schema
        """
        path = Path(path)
        reader = _FILE_READERS.get(path.suffix.lower())
        if reader is None:
            raise ValueError(f"Unsupported config file suffix {path.suffix!r} (expected .yaml, .yml or .toml)")
        if not path.is_file():
            raise FileNotFoundError(f"No configuration file at {path}")
        return cls._from_dict(reader(path))

    @classmethod
    def default(cls) -> Settings:
        return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any], *, validate: bool = True) -> Settings:
        """
        Create Settings from a dictionary.

        The dictionary is validated against the configuration schema before
        any section is built.
        """
        if validate:
            try:
                jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
            except jsonschema.ValidationError as e:
                raise InvalidConfigError(
                    f"Configuration validation failed: {e.message}",
                    field_name=".".join(str(p) for p in e.absolute_path) or None,
                    cause=e,
                ) from e

        try:
            return cls(
                step=StepConfig(**data.get("step", {})),
                workers=WorkerPoolConfig(**data.get("workers", {})),
                evaluation=EvaluationConfig(**data.get("evaluation", {})),
                logging=LoggingConfig(**data.get("logging", {})),
                openai=OpenAIConfig(**data.get("openai", {})),
            )
        except (TypeError, ValueError) as e:
            raise InvalidConfigError(f"Configuration validation failed: {e}", cause=e) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        return dataclasses.asdict(self)


# =============================================================================
# Global Settings & Helpers
# =============================================================================

_global_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance, creating it from the environment if needed."""
    global _global_settings
    if _global_settings is None:
        _global_settings = Settings.from_env()
    return _global_settings


def configure(settings: Settings | None = None, **kwargs) -> Settings:
    """
    Configure global settings.

    Args:
        settings: Settings object to use globally
        **kwargs: Replace whole sections (e.g. `step=StepConfig(timeout=5)`)

    Returns:
        The configured Settings object
    """
    global _global_settings

    if settings is not None:
        _global_settings = settings
    elif _global_settings is None:
        _global_settings = Settings.from_env()

    for key, value in kwargs.items():
        if not hasattr(_global_settings, key):
            raise InvalidConfigError(f"Unknown settings section: {key}", field_name=key)
        setattr(_global_settings, key, value)

    return _global_settings


def reset_settings() -> None:
    """Drop the global settings so the next `get_settings()` reloads them."""
    global _global_settings
    _global_settings = None


def load_env(path: str | None = None, *, override: bool = False) -> bool:
    """Load a .env file (`path`, or the nearest one found from the cwd). Returns False when none exists."""
    dotenv_path = path if path else find_dotenv(usecwd=True)
    return bool(dotenv_path) and load_dotenv(dotenv_path, override=override)


__all__ = ["Settings", "get_settings", "configure", "reset_settings", "load_env"]

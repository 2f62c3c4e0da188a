"""
Completion provider configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class OpenAIConfig:
    """Configuration for the OpenAI-backed completion adapter."""

    api_key: str | None = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    base_url: str | None = None
    organization: str | None = None

    model: str = "gpt-4o"
    temperature: float | None = None
    max_tokens: int | None = None
    system_prompt: str | None = None

    # Retries happen inside the SDK, never in the engine
    max_retries: int = 2

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.temperature is not None and not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be between 0 and 2")
        if self.max_tokens is not None and self.max_tokens < 1:
            raise ValueError("max_tokens must be positive")


__all__ = ["OpenAIConfig"]

"""
Completion capability contract and adapters.

The engine consumes exactly one operation from its model backend:
`complete(prompt, timeout) -> text`. Anything that satisfies the
`Completion` protocol can drive every topology; `as_completion` adapts
plain sync or async callables and `OpenAICompletion` talks to an
OpenAI-compatible chat completions endpoint.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

import openai
from openai import AsyncOpenAI

from .concurrency import run_sync
from .errors import CompletionTimeoutError, ProviderFailureError

if TYPE_CHECKING:
    from .config import OpenAIConfig


@runtime_checkable
class Completion(Protocol):
    """
    Protocol for the generative-completion capability.

    Implementations return the generated text, or raise
    `CompletionTimeoutError` / `ProviderFailureError` (any other exception
    is treated as a provider failure). They must be safe to call
    concurrently; rate limiting and retries are their own concern.
    """

    async def complete(self, prompt: str, *, timeout: float | None = None) -> str:
        ...


CompletionFn = Callable[..., Union[str, Awaitable[str]]]


class CallableCompletion:
    """
    Adapt a plain callable to the `Completion` protocol.

    The callable receives the prompt, plus `timeout=` when it declares a
    `timeout` parameter. Synchronous callables run in the shared thread
    pool so they never block the event loop.
    """

    def __init__(self, fn: CompletionFn) -> None:
        self._fn = fn
        self._is_async = inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
            getattr(fn, "__call__", None)
        )
        try:
            params = inspect.signature(fn).parameters
        except (TypeError, ValueError):
            params = {}
        self._accepts_timeout = "timeout" in params or any(
            p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values()
        )

    async def complete(self, prompt: str, *, timeout: float | None = None) -> str:
        kwargs: dict[str, Any] = {"timeout": timeout} if self._accepts_timeout else {}
        if self._is_async:
            result = await self._fn(prompt, **kwargs)
        else:
            result = await run_sync(self._fn, prompt, **kwargs)
            if inspect.isawaitable(result):
                result = await result
        if not isinstance(result, str):
            raise ProviderFailureError(
                f"Completion returned {type(result).__name__}, expected str"
            )
        return result


def as_completion(backend: Completion | CompletionFn) -> Completion:
    """Return `backend` unchanged if it already is a `Completion`, else wrap it."""
    if isinstance(backend, Completion):
        return backend
    if callable(backend):
        return CallableCompletion(backend)
    raise TypeError(f"Cannot use {type(backend).__name__} as a completion backend")


class OpenAICompletion:
    """
    Completion backed by the OpenAI chat completions API.

    Example:
        ```python
        completion = OpenAICompletion(model="gpt-4o-mini")
        text = await completion.complete("Summarize: ...", timeout=30)
        ```
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        organization: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        system_prompt: str | None = None,
        max_retries: int = 2,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt

        if client is None:
            client_kwargs: dict[str, Any] = {"max_retries": max_retries}
            if api_key:
                client_kwargs["api_key"] = api_key
            if base_url:
                client_kwargs["base_url"] = base_url
            if organization:
                client_kwargs["organization"] = organization
            client = AsyncOpenAI(**client_kwargs)
        self.client = client

    @classmethod
    def from_config(cls, config: OpenAIConfig, *, client: AsyncOpenAI | None = None) -> OpenAICompletion:
        return cls(
            config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            organization=config.organization,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            system_prompt=config.system_prompt,
            max_retries=config.max_retries,
            client=client,
        )

    def _build_params(self, prompt: str, timeout: float | None) -> dict[str, Any]:
        messages: list[dict[str, str]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": prompt})

        params: dict[str, Any] = {"model": self.model, "messages": messages}
        if self.temperature is not None:
            params["temperature"] = self.temperature
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens
        if timeout is not None:
            params["timeout"] = timeout
        return params

    async def complete(self, prompt: str, *, timeout: float | None = None) -> str:
        params = self._build_params(prompt, timeout)
        try:
            response = await self.client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            raise CompletionTimeoutError(timeout=timeout, cause=e) from e
        except asyncio.TimeoutError as e:
            raise CompletionTimeoutError(timeout=timeout, cause=e) from e
        except openai.APIStatusError as e:
            raise ProviderFailureError(
                f"OpenAI request failed: {e.message}",
                status=e.status_code,
                retryable=e.status_code in (429, 500, 502, 503, 504),
                cause=e,
            ) from e
        except openai.OpenAIError as e:
            raise ProviderFailureError(f"OpenAI request failed: {e}", cause=e) from e

        if not response.choices:
            raise ProviderFailureError("OpenAI response contained no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ProviderFailureError("OpenAI response contained no text content")
        return content

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> OpenAICompletion:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


__all__ = [
    "Completion",
    "CompletionFn",
    "CallableCompletion",
    "as_completion",
    "OpenAICompletion",
]

"""Tests for completion adapters."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from workflow_patterns.completion import (
    CallableCompletion,
    Completion,
    OpenAICompletion,
    as_completion,
)
from workflow_patterns.config import OpenAIConfig
from workflow_patterns.errors import CompletionTimeoutError, ProviderFailureError

from tests._testkit import ScriptedCompletion

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def mock_client(result=None, side_effect=None):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=result, side_effect=side_effect)
    client.close = AsyncMock()
    return client


class TestCallableCompletion:
    """Adapting plain callables."""

    @pytest.mark.asyncio
    async def test_sync_function(self):
        completion = CallableCompletion(lambda prompt: f"echo: {prompt}")
        assert await completion.complete("hi") == "echo: hi"

    @pytest.mark.asyncio
    async def test_async_function(self):
        async def backend(prompt):
            await asyncio.sleep(0)
            return prompt[::-1]

        assert await CallableCompletion(backend).complete("abc") == "cba"

    @pytest.mark.asyncio
    async def test_timeout_forwarded_when_accepted(self):
        seen = {}

        async def backend(prompt, timeout=None):
            seen["timeout"] = timeout
            return "ok"

        await CallableCompletion(backend).complete("x", timeout=7.0)
        assert seen == {"timeout": 7.0}

    @pytest.mark.asyncio
    async def test_timeout_forwarded_through_kwargs(self):
        seen = {}

        def backend(prompt, **kwargs):
            seen.update(kwargs)
            return "ok"

        await CallableCompletion(backend).complete("x", timeout=3.0)
        assert seen == {"timeout": 3.0}

    @pytest.mark.asyncio
    async def test_non_string_result_is_provider_failure(self):
        completion = CallableCompletion(lambda prompt: {"text": prompt})
        with pytest.raises(ProviderFailureError):
            await completion.complete("x")

    @pytest.mark.asyncio
    async def test_exceptions_propagate(self):
        def backend(prompt):
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            await CallableCompletion(backend).complete("x")


class TestAsCompletion:
    def test_protocol_objects_pass_through(self):
        backend = ScriptedCompletion()
        assert isinstance(backend, Completion)
        assert as_completion(backend) is backend

    def test_callables_are_wrapped(self):
        assert isinstance(as_completion(lambda prompt: prompt), CallableCompletion)

    def test_other_objects_rejected(self):
        with pytest.raises(TypeError):
            as_completion("not a backend")


class TestOpenAICompletion:
    """OpenAI adapter with a mocked client."""

    @pytest.mark.asyncio
    async def test_success(self):
        client = mock_client(chat_response("Paris"))
        completion = OpenAICompletion("gpt-4o-mini", temperature=0.2, system_prompt="Be brief.", client=client)

        text = await completion.complete("Capital of France?", timeout=12.0)

        assert text == "Paris"
        client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4o-mini",
            messages=[
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "Capital of France?"},
            ],
            temperature=0.2,
            timeout=12.0,
        )

    @pytest.mark.asyncio
    async def test_minimal_params(self):
        client = mock_client(chat_response("ok"))

        await OpenAICompletion(client=client).complete("hi")

        client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4o",
            messages=[{"role": "user", "content": "hi"}],
        )

    @pytest.mark.asyncio
    async def test_timeout_error(self):
        client = mock_client(side_effect=openai.APITimeoutError(request=REQUEST))

        with pytest.raises(CompletionTimeoutError) as exc_info:
            await OpenAICompletion(client=client).complete("hi", timeout=1.0)
        assert exc_info.value.timeout == 1.0

    @pytest.mark.asyncio
    async def test_status_error(self):
        error = openai.APIStatusError(
            "Service unavailable",
            response=httpx.Response(503, request=REQUEST),
            body=None,
        )
        client = mock_client(side_effect=error)

        with pytest.raises(ProviderFailureError) as exc_info:
            await OpenAICompletion(client=client).complete("hi")
        assert exc_info.value.status == 503
        assert exc_info.value.retryable is True
        assert exc_info.value.cause is error

    @pytest.mark.asyncio
    async def test_client_error_not_retryable(self):
        error = openai.APIStatusError(
            "Bad request",
            response=httpx.Response(400, request=REQUEST),
            body=None,
        )
        client = mock_client(side_effect=error)

        with pytest.raises(ProviderFailureError) as exc_info:
            await OpenAICompletion(client=client).complete("hi")
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_connection_error(self):
        client = mock_client(side_effect=openai.APIConnectionError(request=REQUEST))

        with pytest.raises(ProviderFailureError):
            await OpenAICompletion(client=client).complete("hi")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [SimpleNamespace(choices=[]), chat_response(None)])
    async def test_empty_response(self, response):
        client = mock_client(response)

        with pytest.raises(ProviderFailureError):
            await OpenAICompletion(client=client).complete("hi")

    @pytest.mark.asyncio
    async def test_from_config_and_close(self):
        client = mock_client(chat_response("ok"))
        config = OpenAIConfig(api_key="sk-test", model="gpt-4o-mini", max_tokens=64)

        async with OpenAICompletion.from_config(config, client=client) as completion:
            assert completion.model == "gpt-4o-mini"
            assert completion.max_tokens == 64
            assert await completion.complete("hi") == "ok"

        client.close.assert_awaited_once()

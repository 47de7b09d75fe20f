"""
Tests for the generation client.

The AsyncOpenAI client is replaced with mocks; nothing leaves the process.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from debate_room.config import Settings
from debate_room.services.debate.errors import (
    ConfigurationError,
    GenerationTimeout,
    ProviderError,
)
from debate_room.services.debate.generation import GenerationClient

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _chunk(token):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=token))])


def _client_with(settings, create: AsyncMock) -> GenerationClient:
    client = GenerationClient(settings)
    client._client = MagicMock()
    client._client.chat.completions.create = create
    return client


# =============================================================================
# CONFIGURATION
# =============================================================================

@pytest.mark.asyncio
async def test_missing_api_key_is_configuration_error():
    client = GenerationClient(Settings(_env_file=None, openai_api_key="", database_url=""))

    assert client.has_api_key is False
    with pytest.raises(ConfigurationError):
        await client.complete("system", "user")


def test_premium_users_choose_from_allow_list(settings):
    client = GenerationClient(settings)

    assert client.resolve_model("gpt-4o", premium=True) == "gpt-4o"
    assert client.resolve_model("gpt-4o", premium=False) == settings.debate_model
    assert client.resolve_model("not-a-model", premium=True) == settings.debate_model
    assert client.resolve_model(None, premium=True) == settings.debate_model


# =============================================================================
# CALLS
# =============================================================================

@pytest.mark.asyncio
async def test_complete_returns_text(settings):
    create = AsyncMock(return_value=_completion("<output>Hello</output>"))
    client = _client_with(settings, create)

    text = await client.complete("system", "user", model="gpt-4o", json_mode=True, max_tokens=50)

    assert text == "<output>Hello</output>"
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["max_tokens"] == 50
    assert kwargs["messages"][0] == {"role": "system", "content": "system"}


@pytest.mark.asyncio
async def test_empty_content_is_empty_string(settings):
    client = _client_with(settings, AsyncMock(return_value=_completion(None)))

    assert await client.complete("system", "user") == ""


@pytest.mark.asyncio
async def test_stream_yields_tokens_in_order(settings):
    async def chunks():
        for token in ["The ", None, "market ", "is big"]:
            yield _chunk(token)

    create = AsyncMock(return_value=chunks())
    client = _client_with(settings, create)

    tokens = [t async for t in client.stream("system", "user")]

    assert tokens == ["The ", "market ", "is big"]
    assert create.call_args.kwargs["stream"] is True


# =============================================================================
# ERROR TRANSLATION
# =============================================================================

@pytest.mark.asyncio
async def test_timeout_becomes_generation_timeout(settings):
    client = _client_with(settings, AsyncMock(side_effect=openai.APITimeoutError(request=REQUEST)))

    with pytest.raises(GenerationTimeout):
        await client.complete("system", "user")


@pytest.mark.asyncio
async def test_connection_error_becomes_provider_error(settings):
    client = _client_with(settings, AsyncMock(side_effect=openai.APIConnectionError(request=REQUEST)))

    with pytest.raises(ProviderError):
        await client.complete("system", "user")


@pytest.mark.asyncio
async def test_rejected_key_is_configuration_error(settings):
    error = openai.AuthenticationError(
        "Incorrect API key provided",
        response=httpx.Response(401, request=REQUEST),
        body=None,
    )
    client = _client_with(settings, AsyncMock(side_effect=error))

    with pytest.raises(ConfigurationError):
        await client.complete("system", "user")


@pytest.mark.asyncio
async def test_stream_error_translated(settings):
    client = _client_with(settings, AsyncMock(side_effect=openai.APIConnectionError(request=REQUEST)))

    with pytest.raises(ProviderError):
        async for _ in client.stream("system", "user"):
            pass

"""Tests for the LiteLLM-backed adapter."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from modelweave.catalog.defaults import GOOGLE, OPENAI
from modelweave.catalog.models import Model, Provider
from modelweave.config import ProviderCredentials
from modelweave.errors import ProviderError
from modelweave.models import Request
from modelweave.providers.litellm_adapter import LiteLLMAdapter, litellm_model_name


def _litellm_response(content: str = "Hello!") -> MagicMock:
    response = MagicMock()
    response.id = "resp-1"
    response.model = "gpt-4o"
    response.choices = [MagicMock(message=MagicMock(content=content), finish_reason="stop")]
    response.usage = MagicMock(prompt_tokens=10, completion_tokens=5)
    return response


def test_model_name_uses_provider_prefix() -> None:
    gpt = OPENAI.models[0]
    flash = next(m for m in GOOGLE.models if m.id == "gemini-2.5-flash")

    assert litellm_model_name(OPENAI, gpt) == "openai/gpt-4o"
    assert litellm_model_name(GOOGLE, flash) == "gemini/gemini-2.5-flash"


def test_prefixed_model_id_passes_through() -> None:
    provider = Provider(
        id="router",
        api_format="litellm",
        models=(Model(id="openrouter/meta-llama/llama-3", provider_id="router"),),
    )

    assert litellm_model_name(provider, provider.models[0]) == "openrouter/meta-llama/llama-3"


@pytest.mark.asyncio
async def test_invoke_passes_credentials_and_normalizes() -> None:
    adapter = LiteLLMAdapter(timeout=30.0)
    credentials = ProviderCredentials(api_key="sk-test", api_base="http://proxy.local")
    request = Request(prompt="Hi", system_prompt="Be nice", max_tokens=32, stop=("END",))

    with patch("litellm.acompletion", new=AsyncMock(return_value=_litellm_response())) as mock:
        completion = await adapter.invoke(OPENAI, OPENAI.models[0], request, credentials)

    kwargs = mock.call_args.kwargs
    assert kwargs["model"] == "openai/gpt-4o"
    assert kwargs["api_key"] == "sk-test"
    assert kwargs["api_base"] == "http://proxy.local"
    assert kwargs["max_tokens"] == 32
    assert kwargs["stop"] == ["END"]
    assert kwargs["messages"][0] == {"role": "system", "content": "Be nice"}

    assert completion.content == "Hello!"
    assert completion.usage.total_tokens == 15
    assert completion.finish_reason == "stop"


@pytest.mark.asyncio
async def test_invoke_wraps_failures_with_status() -> None:
    class RateLimitError(Exception):
        status_code = 429

    adapter = LiteLLMAdapter()

    with patch("litellm.acompletion", new=AsyncMock(side_effect=RateLimitError("slow down"))):
        with pytest.raises(ProviderError) as exc_info:
            await adapter.invoke(
                OPENAI, OPENAI.models[0], Request(prompt="Hi"), ProviderCredentials()
            )

    assert exc_info.value.provider_status == 429
    assert "slow down" in exc_info.value.message

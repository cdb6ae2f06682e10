"""Provider adapters that perform the external model calls."""

from typing import Optional

import httpx

from modelweave.providers.base import ProviderAdapter, ProviderCompletion, require_api_key
from modelweave.providers.http import (
    AnthropicAdapter,
    GeminiAdapter,
    HTTPProviderAdapter,
    OpenAICompatibleAdapter,
)
from modelweave.providers.litellm_adapter import LiteLLMAdapter, litellm_model_name


def default_adapters(
    client: Optional[httpx.AsyncClient] = None, timeout: float = 60.0
) -> dict[str, ProviderAdapter]:
    """Build the adapter table keyed by provider ``api_format``.

    Args:
        client: Optional shared httpx client for the HTTP adapters
        timeout: Request timeout in seconds

    Returns:
        Mapping of api_format to adapter
    """
    return {
        "openai": OpenAICompatibleAdapter(client=client, timeout=timeout),
        "anthropic": AnthropicAdapter(client=client, timeout=timeout),
        "gemini": GeminiAdapter(client=client, timeout=timeout),
        "litellm": LiteLLMAdapter(timeout=timeout),
    }


__all__ = [
    "AnthropicAdapter",
    "GeminiAdapter",
    "HTTPProviderAdapter",
    "LiteLLMAdapter",
    "OpenAICompatibleAdapter",
    "ProviderAdapter",
    "ProviderCompletion",
    "default_adapters",
    "litellm_model_name",
    "require_api_key",
]

"""Built-in provider definitions.

Prices are USD per 1k tokens. Updated as of October 2025.
"""

from typing import Optional

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.models import (
    Model,
    Pricing,
    Provider,
    ProviderCapabilities,
    RateLimit,
)

OPENAI = Provider(
    id="openai",
    name="OpenAI",
    endpoint="https://api.openai.com/v1/chat/completions",
    api_format="openai",
    rate_limit=RateLimit(requests=500, window_ms=60_000),
    pricing=Pricing(input_per_1k=0.005, output_per_1k=0.015),
    capabilities=ProviderCapabilities(streaming=True, vision=True, tools=True),
    reliability=0.97,
    models=(
        Model(
            id="gpt-4o",
            provider_id="openai",
            name="GPT-4o",
            max_output_tokens=16384,
            context_window=128_000,
            capabilities=("vision", "coding", "reasoning"),
            cost_tier=2,
        ),
        Model(
            id="gpt-4o-mini",
            provider_id="openai",
            name="GPT-4o mini",
            max_output_tokens=16384,
            context_window=128_000,
            capabilities=("vision", "general"),
            cost_tier=1,
        ),
    ),
)

ANTHROPIC = Provider(
    id="anthropic",
    name="Anthropic",
    endpoint="https://api.anthropic.com/v1/messages",
    api_format="anthropic",
    rate_limit=RateLimit(requests=50, window_ms=60_000),
    pricing=Pricing(input_per_1k=0.003, output_per_1k=0.015),
    capabilities=ProviderCapabilities(streaming=True, vision=True, tools=True),
    reliability=0.95,
    models=(
        Model(
            id="claude-sonnet-4-5",
            provider_id="anthropic",
            name="Claude Sonnet 4.5",
            max_output_tokens=8192,
            context_window=200_000,
            capabilities=("vision", "analysis", "writing", "research"),
            cost_tier=3,
        ),
        Model(
            id="claude-haiku-4-5",
            provider_id="anthropic",
            name="Claude Haiku 4.5",
            max_output_tokens=8192,
            context_window=200_000,
            capabilities=("general", "speed"),
            cost_tier=1,
        ),
    ),
)

GOOGLE = Provider(
    id="google",
    name="Google AI",
    endpoint="https://generativelanguage.googleapis.com/v1beta/models",
    api_format="gemini",
    rate_limit=RateLimit(requests=60, window_ms=60_000),
    pricing=Pricing(input_per_1k=0.00125, output_per_1k=0.005),
    capabilities=ProviderCapabilities(streaming=True, vision=True, tools=False),
    reliability=0.9,
    models=(
        Model(
            id="gemini-2.5-pro",
            provider_id="google",
            name="Gemini 2.5 Pro",
            max_output_tokens=65536,
            context_window=2_000_000,
            capabilities=("vision", "reasoning", "multimodal"),
            cost_tier=3,
        ),
        Model(
            id="gemini-2.5-flash",
            provider_id="google",
            name="Gemini 2.5 Flash",
            max_output_tokens=65536,
            context_window=1_000_000,
            capabilities=("vision", "general"),
            cost_tier=2,
        ),
        Model(
            id="gemini-2.5-flash-lite",
            provider_id="google",
            name="Gemini 2.5 Flash Lite",
            max_output_tokens=8192,
            context_window=1_000_000,
            capabilities=("speed", "classification"),
            cost_tier=1,
        ),
    ),
)

CEREBRAS = Provider(
    id="cerebras",
    name="Cerebras",
    endpoint="https://api.cerebras.ai/v1/chat/completions",
    api_format="openai",
    rate_limit=RateLimit(requests=30, window_ms=60_000),
    pricing=Pricing(input_per_1k=0.0001, output_per_1k=0.0001),
    capabilities=ProviderCapabilities(streaming=True),
    reliability=0.85,
    models=(
        Model(
            id="llama3.1-8b",
            provider_id="cerebras",
            name="Llama 3.1 8B",
            max_output_tokens=8192,
            context_window=32_768,
            capabilities=("speed", "general"),
            cost_tier=0,
        ),
        Model(
            id="llama-3.3-70b",
            provider_id="cerebras",
            name="Llama 3.3 70B",
            max_output_tokens=8192,
            context_window=65_536,
            capabilities=("general", "coding"),
            cost_tier=1,
        ),
    ),
)

# OpenAI-compatible gateway fronting Google and OpenAI models under namespaced ids
GATEWAY = Provider(
    id="gateway",
    name="AI Gateway",
    endpoint="https://ai.gateway.lovable.dev/v1/chat/completions",
    api_format="openai",
    rate_limit=RateLimit(requests=60, window_ms=60_000),
    pricing=Pricing(input_per_1k=0.0005, output_per_1k=0.0015),
    capabilities=ProviderCapabilities(streaming=True, vision=True, tools=True),
    reliability=0.95,
    models=(
        Model(
            id="google/gemini-2.5-pro",
            provider_id="gateway",
            name="Gemini 2.5 Pro",
            max_output_tokens=65536,
            context_window=2_000_000,
            capabilities=("vision", "reasoning", "multimodal"),
            cost_tier=3,
        ),
        Model(
            id="google/gemini-2.5-flash",
            provider_id="gateway",
            name="Gemini 2.5 Flash",
            max_output_tokens=65536,
            context_window=1_000_000,
            capabilities=("vision", "general"),
            cost_tier=2,
        ),
        Model(
            id="google/gemini-2.5-flash-lite",
            provider_id="gateway",
            name="Gemini 2.5 Flash Lite",
            max_output_tokens=8192,
            context_window=1_000_000,
            capabilities=("speed", "classification"),
            cost_tier=1,
        ),
        Model(
            id="openai/gpt-5",
            provider_id="gateway",
            name="GPT-5",
            max_output_tokens=16384,
            context_window=128_000,
            capabilities=("vision", "coding", "reasoning"),
            cost_tier=3,
        ),
        Model(
            id="openai/gpt-5-mini",
            provider_id="gateway",
            name="GPT-5 Mini",
            max_output_tokens=16384,
            context_window=128_000,
            capabilities=("vision", "general"),
            cost_tier=2,
        ),
        Model(
            id="openai/gpt-5-nano",
            provider_id="gateway",
            name="GPT-5 Nano",
            max_output_tokens=8192,
            context_window=32_000,
            capabilities=("speed", "general"),
            cost_tier=1,
        ),
    ),
)

DEFAULT_PROVIDERS: tuple[Provider, ...] = (OPENAI, ANTHROPIC, GOOGLE, CEREBRAS, GATEWAY)


def default_catalog(extra: Optional[list[Provider]] = None) -> ProviderCatalog:
    """Build a catalog with the built-in providers registered.

    Args:
        extra: Additional providers registered after the built-ins
            (a provider with a built-in id replaces it)

    Returns:
        A new ProviderCatalog
    """
    catalog = ProviderCatalog(list(DEFAULT_PROVIDERS))
    for provider in extra or []:
        catalog.register(provider)
    return catalog

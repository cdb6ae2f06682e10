"""Provider and model descriptions held by the provider catalog.

All models are frozen pydantic models: a provider is immutable once it has
been registered, and replacing it means registering a new value.
"""

from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RateLimit(BaseModel):
    """Per-provider request window.

    Attributes:
        requests: Maximum admitted calls per window
        window_ms: Window length in milliseconds
        tokens_per_minute: Optional prompt-token throughput budget
    """

    model_config = ConfigDict(frozen=True)

    requests: int = Field(default=60, ge=1, description="Calls admitted per window")
    window_ms: int = Field(default=60_000, ge=1, description="Window length in ms")
    tokens_per_minute: Optional[int] = Field(
        default=None, ge=1, description="Prompt-token budget per minute (None=unbounded)"
    )

    @property
    def window_seconds(self) -> float:
        """Window length in seconds."""
        return self.window_ms / 1000.0


class Pricing(BaseModel):
    """Price per 1k tokens in USD."""

    model_config = ConfigDict(frozen=True)

    input_per_1k: float = Field(default=0.0, ge=0.0)
    output_per_1k: float = Field(default=0.0, ge=0.0)


class ProviderCapabilities(BaseModel):
    """Capability flags advertised by a provider."""

    model_config = ConfigDict(frozen=True)

    streaming: bool = False
    vision: bool = False
    tools: bool = False

    @property
    def count(self) -> int:
        """Number of enabled capability flags."""
        return int(self.streaming) + int(self.vision) + int(self.tools)


class Model(BaseModel):
    """A named inference target exposed by a provider.

    Attributes:
        id: Globally unique model identifier (e.g. "gpt-4o")
        provider_id: Owning provider
        name: Display name
        max_output_tokens: Largest completion the model will produce
        context_window: Context size in tokens
        capabilities: Free-form capability tags ("vision", "coding", ...)
        cost_tier: Ordinal cost tier, 0 = free, higher = more expensive
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    provider_id: str = Field(min_length=1)
    name: str = ""
    max_output_tokens: int = Field(default=4096, ge=1)
    context_window: int = Field(default=8192, ge=1)
    capabilities: tuple[str, ...] = ()
    cost_tier: int = Field(default=1, ge=0)

    def has_capability(self, tag: str) -> bool:
        """Check whether the model carries a capability tag."""
        return tag in self.capabilities


class Provider(BaseModel):
    """An external endpoint exposing one or more models.

    Attributes:
        id: Provider identifier (e.g. "openai")
        name: Display name
        models: Models served by this provider
        endpoint: Base URL or endpoint reference for the adapter
        api_format: Adapter key used to speak to the endpoint
        requires_auth: Whether calls need credentials
        rate_limit: Request window for admission control
        pricing: Per-1k token pricing
        capabilities: Provider capability flags
        reliability: Prior reliability score in [0, 1]
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    models: tuple[Model, ...] = ()
    endpoint: str = ""
    api_format: str = "openai"
    requires_auth: bool = True
    rate_limit: RateLimit = Field(default_factory=RateLimit)
    pricing: Pricing = Field(default_factory=Pricing)
    capabilities: ProviderCapabilities = Field(default_factory=ProviderCapabilities)
    reliability: float = Field(default=0.9, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_models(self) -> "Provider":
        """Validate that every model belongs to this provider and ids are unique.

        Returns:
            The validated provider

        Raises:
            ValueError: If a model names another provider or an id repeats
        """
        seen: set[str] = set()
        for model in self.models:
            if model.provider_id != self.id:
                raise ValueError(
                    f"model '{model.id}' declares provider '{model.provider_id}', "
                    f"expected '{self.id}'"
                )
            if model.id in seen:
                raise ValueError(f"duplicate model id '{model.id}' in provider '{self.id}'")
            seen.add(model.id)
        return self


class ModelFilter(BaseModel):
    """Capability predicate used by ``ProviderCatalog.list_models``.

    Unset fields do not constrain the match.
    """

    capabilities: list[str] = Field(default_factory=list, description="Tags all required")
    max_cost_tier: Optional[int] = Field(default=None, ge=0)
    min_context_window: Optional[int] = Field(default=None, ge=1)
    vision: Optional[bool] = None
    tools: Optional[bool] = None
    streaming: Optional[bool] = None
    provider_ids: Optional[list[str]] = None

    def matches(self, provider: Provider, model: Model) -> bool:
        """Check whether a (provider, model) pair satisfies the filter."""
        if any(tag not in model.capabilities for tag in self.capabilities):
            return False
        if self.max_cost_tier is not None and model.cost_tier > self.max_cost_tier:
            return False
        if self.min_context_window is not None and model.context_window < self.min_context_window:
            return False
        if self.provider_ids is not None and provider.id not in self.provider_ids:
            return False

        caps = provider.capabilities
        # "vision" may also be advertised per model through a capability tag
        if self.vision is not None and (caps.vision or model.has_capability("vision")) != self.vision:
            return False
        if self.tools is not None and caps.tools != self.tools:
            return False
        if self.streaming is not None and caps.streaming != self.streaming:
            return False
        return True


ModelPredicate = Callable[[Provider, Model], bool]
ModelSelector = Union[ModelFilter, ModelPredicate, None]

"""Request and response bodies for the HTTP API."""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from modelweave.models import Message, Request, Response


class PromptFields(BaseModel):
    """Request fields shared by the call endpoints."""

    model_config = ConfigDict(protected_namespaces=())

    prompt: str = Field(min_length=1)
    system_prompt: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("system_prompt", "systemPrompt")
    )
    history: list[Message] = Field(default_factory=list)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(
        default=None, ge=1, validation_alias=AliasChoices("max_tokens", "maxTokens")
    )
    stop: list[str] = Field(default_factory=list)

    def to_request(self) -> Request:
        return Request(
            prompt=self.prompt,
            system_prompt=self.system_prompt,
            history=tuple(self.history),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stop=tuple(self.stop),
        )


class CallRequest(PromptFields):
    """Body of ``POST /api/v1/llm/call``."""

    model: str = Field(min_length=1)
    timeout_ms: Optional[int] = Field(default=None, ge=1)


class CallResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    response: Response
    elapsed_ms: float


class MultiCallRequest(PromptFields):
    """Body of ``POST /api/v1/llm/multi``."""

    models: list[str] = Field(min_length=1)
    strategy: str = "parallel"
    consensus_threshold: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("consensus_threshold", "consensusThreshold"),
    )


class SaveChainRequest(BaseModel):
    """Body of ``POST /api/v1/chains``."""

    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    graph: dict[str, Any]


class SavedChainResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    graph: dict[str, Any]
    created_at: Optional[str] = None


class ModelInfo(BaseModel):
    """Catalog model as listed by ``GET /api/v1/models``."""

    model_config = ConfigDict(protected_namespaces=())

    id: str
    name: str
    provider_id: str
    context_window: int
    max_output_tokens: int
    cost_tier: int
    capabilities: list[str]


class ProviderInfo(BaseModel):
    """Provider with live status as listed by ``GET /api/v1/providers``."""

    id: str
    name: str
    api_format: str
    models: list[str]
    status: str
    requests: int
    errors: int
    rate_limit_hits: int
    avg_latency_ms: float
    total_cost: float
    rate_limit: dict[str, Any]
    window_count: int

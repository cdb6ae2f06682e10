"""Catalog route handlers: models and providers."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from modelweave.api.dependencies import get_orchestrator
from modelweave.api.schemas import ModelInfo, ProviderInfo
from modelweave.catalog.models import ModelFilter
from modelweave.orchestrator import Orchestrator

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get("/models", response_model=list[ModelInfo])
async def list_models(
    capability: Optional[list[str]] = Query(None),
    max_cost_tier: Optional[int] = Query(None, ge=0),
    min_context_window: Optional[int] = Query(None, ge=1),
    vision: Optional[bool] = None,
    tools: Optional[bool] = None,
    streaming: Optional[bool] = None,
    provider: Optional[list[str]] = Query(None),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> list[ModelInfo]:
    """List catalog models matching a filter.

    Example:
        >>> GET /api/v1/models?capability=coding&max_cost_tier=1
    """
    model_filter = ModelFilter(
        capabilities=capability or [],
        max_cost_tier=max_cost_tier,
        min_context_window=min_context_window,
        vision=vision,
        tools=tools,
        streaming=streaming,
        provider_ids=provider,
    )
    return [
        ModelInfo(
            id=model.id,
            name=model.name or model.id,
            provider_id=model.provider_id,
            context_window=model.context_window,
            max_output_tokens=model.max_output_tokens,
            cost_tier=model.cost_tier,
            capabilities=list(model.capabilities),
        )
        for model in orchestrator.catalog.list_models(model_filter)
    ]


@router.get("/providers", response_model=list[ProviderInfo])
async def list_providers(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> list[ProviderInfo]:
    """List providers with health status, accrued cost and window usage."""
    providers = []
    for provider in orchestrator.catalog.list_providers():
        stats = orchestrator.usage.get(provider.id)
        window = orchestrator.limiter.window_state(provider.id)
        providers.append(
            ProviderInfo(
                id=provider.id,
                name=provider.name or provider.id,
                api_format=provider.api_format,
                models=[model.id for model in provider.models],
                status=stats.status.value,
                requests=stats.requests,
                errors=stats.errors,
                rate_limit_hits=stats.rate_limit_hits,
                avg_latency_ms=stats.avg_latency_ms,
                total_cost=orchestrator.accountant.total(provider.id),
                rate_limit=provider.rate_limit.model_dump(),
                window_count=window.count if window else 0,
            )
        )
    return providers

"""Model call route handlers."""

from typing import Any

from fastapi import APIRouter, Depends

from modelweave.api.dependencies import get_orchestrator
from modelweave.api.schemas import CallRequest, CallResponse, MultiCallRequest
from modelweave.orchestrator import Orchestrator

router = APIRouter(prefix="/api/v1/llm", tags=["llm"])


@router.post("/call", response_model=CallResponse)
async def call_model(
    body: CallRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> CallResponse:
    """Route one request to one model.

    Failures are returned with the error's status code: 404 unknown model,
    429 rate limited (with Retry-After), 502/504 provider failure.
    """
    timeout = body.timeout_ms / 1000 if body.timeout_ms else None
    result = await orchestrator.router.call(body.to_request(), body.model, timeout=timeout)
    response = result.unwrap()
    return CallResponse(model_id=result.model_id, response=response, elapsed_ms=result.elapsed_ms)


@router.post("/multi")
async def call_many(
    body: MultiCallRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> dict[str, Any]:
    """Run a multi-model strategy.

    Individual model failures are reported in ``failures``; the status is
    200 whenever the strategy ran.

    Request Body:
        {"prompt": "...", "models": ["gpt-4o", "claude-haiku-4-5"],
         "strategy": "consensus", "consensusThreshold": 2}
    """
    result = await orchestrator.call_many(
        body.to_request(), body.models, body.strategy, body.consensus_threshold
    )
    return result.model_dump(mode="json")

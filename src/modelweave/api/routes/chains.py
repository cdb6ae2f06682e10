"""Chain graph route handlers."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from modelweave.api.dependencies import get_orchestrator
from modelweave.api.schemas import SaveChainRequest, SavedChainResponse
from modelweave.chains.models import ChainExecutionResult, ChainGraph
from modelweave.chains.validation import validate_graph
from modelweave.errors import OrchestrationError
from modelweave.orchestrator import Orchestrator

router = APIRouter(prefix="/api/v1/chains", tags=["chains"])


class ChainNotFoundError(OrchestrationError):
    """Raised when a saved chain id does not exist."""

    error_code = "CHAIN_NOT_FOUND"
    status_code = 404

    def __init__(self, chain_id: str):
        super().__init__(f"Chain '{chain_id}' not found", chain_id=chain_id)


def _execution_response(result: ChainExecutionResult) -> JSONResponse:
    status_code = status.HTTP_200_OK
    if result.exception is not None:
        status_code = result.exception.status_code
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


@router.post("/execute")
async def execute_chain(
    graph: dict[str, Any] = Body(...),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Execute a graph description.

    Accepts ``{"nodes": [...], "edges": [...]}`` or ``{"chain": {...}}``.
    A failed run returns its structured result with the error's status
    code (400 for invalid or cyclic graphs).
    """
    result = await orchestrator.execute_chain(graph)
    return _execution_response(result)


@router.post("", response_model=SavedChainResponse, status_code=status.HTTP_201_CREATED)
async def save_chain(
    body: SaveChainRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> SavedChainResponse:
    """Validate and save a graph.

    Raises:
        InvalidGraphError / CyclicGraphError: Mapped to 400
    """
    graph = ChainGraph.from_dict(body.graph)
    validate_graph(graph)
    record = await orchestrator.graphs.save(body.name, graph, body.description)
    return SavedChainResponse(**record)


@router.get("", response_model=list[SavedChainResponse])
async def list_chains(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> list[SavedChainResponse]:
    records = await orchestrator.graphs.list_graphs(limit=limit)
    return [SavedChainResponse(**record) for record in records]


@router.post("/{chain_id}/execute")
async def execute_saved_chain(
    chain_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> JSONResponse:
    """Execute a previously saved graph."""
    graph = await orchestrator.graphs.get(chain_id)
    if graph is None:
        raise ChainNotFoundError(chain_id)
    result = await orchestrator.execute_chain(graph)
    return _execution_response(result)

"""Health check endpoint for monitoring and load balancers."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from modelweave import __version__
from modelweave.api.dependencies import get_orchestrator
from modelweave.observability.logging import get_logger
from modelweave.orchestrator import Orchestrator
from modelweave.storage.sql_store import SqlRecordStore

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthCheckComponent(BaseModel):
    """Health status of a single component.

    Attributes:
        status: Component status (healthy, unhealthy, degraded)
        message: Optional status message or error details
    """

    status: str
    message: Optional[str] = None


class HealthCheckResponse(BaseModel):
    status: str
    components: dict[str, HealthCheckComponent]
    version: str = __version__


def check_catalog_health(orchestrator: Orchestrator) -> HealthCheckComponent:
    providers = orchestrator.catalog.list_providers()
    if not providers:
        return HealthCheckComponent(status="unhealthy", message="No providers registered")

    down = [
        p.id for p in providers if orchestrator.usage.status(p.id).value == "down"
    ]
    if down:
        return HealthCheckComponent(
            status="degraded", message=f"Providers down: {', '.join(sorted(down))}"
        )
    return HealthCheckComponent(
        status="healthy", message=f"{len(providers)} providers, {len(orchestrator.catalog)} models"
    )


async def check_store_health(orchestrator: Orchestrator) -> HealthCheckComponent:
    store = orchestrator.record_store
    if not isinstance(store, SqlRecordStore):
        return HealthCheckComponent(status="healthy", message="In-memory record store")
    try:
        await store.database.health_check()
        return HealthCheckComponent(status="healthy", message="Database connection successful")
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return HealthCheckComponent(status="unhealthy", message=f"Database error: {e}")


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(orchestrator: Orchestrator = Depends(get_orchestrator)) -> JSONResponse:
    """Health check endpoint.

    Returns:
        200 OK if healthy or degraded, 503 if any component is unhealthy
    """
    components = {
        "catalog": check_catalog_health(orchestrator),
        "record_store": await check_store_health(orchestrator),
    }

    statuses = [c.status for c in components.values()]
    if "unhealthy" in statuses:
        overall_status = "unhealthy"
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif "degraded" in statuses:
        overall_status = "degraded"
        status_code = status.HTTP_200_OK
    else:
        overall_status = "healthy"
        status_code = status.HTTP_200_OK

    response = HealthCheckResponse(status=overall_status, components=components)
    return JSONResponse(status_code=status_code, content=response.model_dump())

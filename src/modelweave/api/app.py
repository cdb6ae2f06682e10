"""FastAPI application factory for the modelweave HTTP API.

This module provides the application factory pattern for creating
configured FastAPI instances with middleware, routes and error handlers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from modelweave import __version__
from modelweave.api.middleware.correlation import CorrelationIdMiddleware
from modelweave.api.middleware.error_handler import setup_error_handlers
from modelweave.api.routes.catalog import router as catalog_router
from modelweave.api.routes.chains import router as chains_router
from modelweave.api.routes.health import router as health_router
from modelweave.api.routes.llm import router as llm_router
from modelweave.config import load_config_from_env
from modelweave.observability.logging import setup_logging
from modelweave.observability.metrics import get_metrics_collector
from modelweave.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events.

    Builds the orchestrator from the environment unless one was supplied to
    ``create_app``; only an orchestrator built here is closed on shutdown.

    Args:
        app: FastAPI application instance

    Yields:
        None during application runtime
    """
    owned = app.state.orchestrator is None
    if owned:
        config = load_config_from_env()
        setup_logging(log_level=config.log_level, json_logs=config.json_logs)
        logger.info("Application startup: building orchestrator")
        app.state.orchestrator = await Orchestrator.from_config(config)

    logger.info("Application startup complete")

    try:
        yield
    finally:
        if owned:
            logger.info("Application shutdown: closing orchestrator")
            await app.state.orchestrator.close()
            app.state.orchestrator = None
        logger.info("Application shutdown complete")


def create_app(orchestrator: Optional[Orchestrator] = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        orchestrator: Orchestrator to serve (built from the environment at
            startup when omitted)

    Returns:
        Configured FastAPI application instance

    Examples:
        >>> app = create_app()
        >>> # uvicorn modelweave.api.app:app --reload
    """
    app = FastAPI(
        title="modelweave API",
        version=__version__,
        description="Multi-provider LLM routing, strategies and chain execution",
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    # TODO: Configure allowed origins for production deployment
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)  # type: ignore[arg-type]

    setup_error_handlers(app)

    app.include_router(llm_router)
    app.include_router(chains_router)
    app.include_router(catalog_router)
    app.include_router(health_router)

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint.

        Examples:
            >>> GET /metrics
            >>> # TYPE modelweave_provider_calls_total counter
        """
        return Response(
            content=get_metrics_collector().generate_metrics(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return app


# Module-level app instance for uvicorn
app = create_app()

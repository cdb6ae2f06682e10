"""Correlation ID middleware for request tracing.

Every request runs under a run ID taken from the ``X-Correlation-ID``
header (or generated), so all strategy and chain events logged while
serving it can be correlated.
"""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from modelweave.observability.logging import get_logger, new_run_id, set_run_id
from modelweave.observability.metrics import get_metrics_collector

logger = get_logger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware attaching a run ID to each request.

    - Sets it in the logging context
    - Adds it to response headers
    - Records request metrics
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request with correlation ID.

        Example:
            Request headers: (none)
            Response headers: X-Correlation-ID: 3f2a9c0b8d1e4f67
        """
        correlation_id = request.headers.get("X-Correlation-ID") or new_run_id()
        set_run_id(correlation_id)
        start_time = time.time()

        logger.info("request_started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=int((time.time() - start_time) * 1000),
            )
            raise
        finally:
            set_run_id(None)

        duration_seconds = time.time() - start_time
        get_metrics_collector().record_http_request(
            method=request.method,
            endpoint=request.url.path,
            status_code=response.status_code,
            duration_seconds=duration_seconds,
        )
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=int(duration_seconds * 1000),
            correlation_id=correlation_id,
        )

        response.headers["X-Correlation-ID"] = correlation_id
        return response

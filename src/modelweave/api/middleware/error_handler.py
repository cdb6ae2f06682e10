"""Error handling middleware for the FastAPI application.

Converts orchestration errors and validation errors into JSON responses
with appropriate HTTP status codes.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from modelweave.errors import OrchestrationError, RateLimitedError

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Configure exception handlers for the FastAPI application.

    Args:
        app: The FastAPI application instance to configure
    """

    @app.exception_handler(OrchestrationError)
    async def handle_orchestration_error(
        request: Request, exc: OrchestrationError
    ) -> JSONResponse:
        """Handle OrchestrationError and subclasses.

        Rate-limited responses carry a ``Retry-After`` header.

        Returns:
            JSONResponse with the error's status code, code, message and context
        """
        headers = {}
        if isinstance(exc, RateLimitedError):
            headers["Retry-After"] = str(max(1, int(exc.retry_after + 0.999)))
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(PydanticValidationError)
    async def handle_validation_error(
        request: Request, exc: PydanticValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors raised while building domain objects.

        Returns:
            JSONResponse with 400 status code and field-level error details
        """
        errors: list[dict[str, Any]] = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({"field": field, "message": error["msg"]})

        return JSONResponse(
            status_code=400,
            content={
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "errors": errors,
            },
        )

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions without exposing internals.

        Returns:
            JSONResponse with 500 status code and a generic message
        """
        logger.exception("Unexpected error occurred: %s", exc)

        return JSONResponse(
            status_code=500,
            content={"code": "INTERNAL_ERROR", "message": "An internal server error occurred"},
        )

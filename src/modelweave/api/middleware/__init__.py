"""API middleware."""

from modelweave.api.middleware.correlation import CorrelationIdMiddleware
from modelweave.api.middleware.error_handler import setup_error_handlers

__all__ = ["CorrelationIdMiddleware", "setup_error_handlers"]

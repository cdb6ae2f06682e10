"""modelweave API module.

This module provides the FastAPI application and route handlers.
"""

from modelweave.api.app import app, create_app

__all__ = ["app", "create_app"]

"""FastAPI dependencies."""

from fastapi import Request

from modelweave.errors import OrchestrationError
from modelweave.orchestrator import Orchestrator


class OrchestratorUnavailableError(OrchestrationError):
    """Raised when a request arrives before the orchestrator is ready."""

    error_code = "ORCHESTRATOR_UNAVAILABLE"
    status_code = 503


def get_orchestrator(request: Request) -> Orchestrator:
    """Get the orchestrator attached to the application.

    Raises:
        OrchestratorUnavailableError: If the application has not started
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise OrchestratorUnavailableError("Orchestrator is not initialized")
    return orchestrator

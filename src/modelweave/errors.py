"""Exception hierarchy for orchestration failures.

Every failure the orchestration core can report is an ``OrchestrationError``
subclass carrying an error code for programmatic handling. Expected
conditions (rate limiting, provider failures) travel as values inside result
objects; the classes are still exceptions so callers can ``raise`` them via
``CallResult.unwrap()`` when they prefer that style.
"""

from typing import Any, Optional, Union


class OrchestrationError(Exception):
    """Base exception for all orchestration errors.

    Attributes:
        message: Human-readable error description
        error_code: Unique code for programmatic error handling
        status_code: HTTP status used when the error reaches the API layer
        retryable: Whether the same call may succeed if repeated later
        context: Additional context information
    """

    error_code: str = "ORCHESTRATION_ERROR"
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize error with message and optional context.

        Args:
            message: Human-readable error description
            **context: Additional context information (model_id, provider_id, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return formatted error message with context."""
        if not self.context:
            return f"[{self.error_code}] {self.message}"

        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"[{self.error_code}] {self.message} ({context_str})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for API responses and persisted records."""
        return {
            "code": self.error_code,
            "message": self.message,
            "context": {k: v for k, v in self.context.items() if v is not None},
        }


class UnknownModelError(OrchestrationError):
    """Raised when a model id is not present in the provider catalog."""

    error_code = "UNKNOWN_MODEL"
    status_code = 404

    def __init__(self, model_id: str, **context: Any) -> None:
        """Initialize with the missing model id.

        Args:
            model_id: Model identifier that could not be resolved
            **context: Additional context information
        """
        super().__init__(f"Model '{model_id}' is not registered", model_id=model_id, **context)
        self.model_id = model_id


class ProviderNotRegisteredError(OrchestrationError):
    """Raised when a provider id is not present in the provider catalog."""

    error_code = "PROVIDER_NOT_REGISTERED"
    status_code = 404

    def __init__(self, provider_id: str, **context: Any) -> None:
        super().__init__(
            f"Provider '{provider_id}' is not registered", provider_id=provider_id, **context
        )
        self.provider_id = provider_id


class RateLimitedError(OrchestrationError):
    """Raised when a provider's request window is full.

    Retryable: the caller may try again after ``retry_after`` seconds.
    """

    error_code = "RATE_LIMITED"
    status_code = 429
    retryable = True

    def __init__(self, provider_id: str, retry_after: float, **context: Any) -> None:
        """Initialize with provider and retry delay.

        Args:
            provider_id: Provider whose budget is exhausted
            retry_after: Seconds until the current window ends
            **context: Additional context information
        """
        super().__init__(
            f"Rate limit reached for provider '{provider_id}'",
            provider_id=provider_id,
            retry_after=round(retry_after, 3),
            **context,
        )
        self.provider_id = provider_id
        self.retry_after = retry_after


class ProviderError(OrchestrationError):
    """Raised when an external provider call fails.

    Covers transport failures, authentication problems, non-2xx replies and
    deadlines. ``status_code`` is the provider's HTTP status, the string
    ``"timeout"`` for deadline expiry, or None when no status is known.
    """

    error_code = "PROVIDER_ERROR"

    def __init__(
        self,
        provider_id: str,
        message: str,
        status_code: Union[int, str, None] = None,
        **context: Any,
    ) -> None:
        """Initialize with provider, status and message.

        Args:
            provider_id: Provider that failed
            message: Failure description
            status_code: HTTP status, "timeout", or None
            **context: Additional context information
        """
        super().__init__(message, provider_id=provider_id, status_code=status_code, **context)
        self.provider_id = provider_id
        self.provider_status = status_code

    @property
    def status_code(self) -> int:  # type: ignore[override]
        """HTTP status for the API layer (upstream failures map to 502/504)."""
        if self.provider_status == "timeout":
            return 504
        return 502

    @property
    def is_timeout(self) -> bool:
        """Whether the call failed because its deadline expired."""
        return self.provider_status == "timeout"


class StrategyError(OrchestrationError):
    """Raised when a multi-call strategy name is not recognized."""

    error_code = "UNKNOWN_STRATEGY"
    status_code = 400

    def __init__(self, strategy: str, **context: Any) -> None:
        super().__init__(f"Unknown strategy '{strategy}'", strategy=strategy, **context)


class InvalidGraphError(OrchestrationError):
    """Raised when a chain graph description is malformed.

    Duplicate node ids, edges referencing missing nodes and unknown node
    types all end up here.
    """

    error_code = "INVALID_GRAPH"
    status_code = 400

    def __init__(self, reason: str, **context: Any) -> None:
        super().__init__(f"Invalid chain graph: {reason}", **context)
        self.reason = reason


class CyclicGraphError(OrchestrationError):
    """Raised when a chain graph contains a cycle.

    Detected before any node is evaluated.
    """

    error_code = "CYCLIC_GRAPH"
    status_code = 400

    def __init__(self, node_ids: list[str], **context: Any) -> None:
        """Initialize with the nodes that participate in (or sit behind) a cycle.

        Args:
            node_ids: Node ids that could not be ordered
            **context: Additional context information
        """
        super().__init__(
            "Chain graph contains a cycle", node_ids=", ".join(node_ids), **context
        )
        self.node_ids = node_ids


class UnknownToolError(OrchestrationError):
    """Raised when a tool node names a tool that is not registered."""

    error_code = "UNKNOWN_TOOL"
    status_code = 400

    def __init__(self, tool_name: str, **context: Any) -> None:
        super().__init__(f"Tool '{tool_name}' is not registered", tool_name=tool_name, **context)
        self.tool_name = tool_name


class ToolAlreadyRegisteredError(OrchestrationError):
    """Raised when registering a tool name twice without ``replace=True``."""

    error_code = "TOOL_ALREADY_REGISTERED"
    status_code = 409

    def __init__(self, tool_name: str, **context: Any) -> None:
        super().__init__(
            f"Tool '{tool_name}' is already registered", tool_name=tool_name, **context
        )


class NodeExecutionError(OrchestrationError):
    """Raised when evaluating a single chain node fails.

    A node failure is fatal to the whole chain run; ``cause`` holds the
    underlying error (a ``ProviderError``, ``UnknownToolError``, ...).
    """

    error_code = "NODE_EXECUTION_ERROR"

    def __init__(
        self,
        node_id: str,
        node_type: str,
        cause: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        """Initialize with the failing node and its cause.

        Args:
            node_id: Id of the node that failed
            node_type: Kind of the node that failed
            cause: Underlying error
            **context: Additional context information
        """
        reason = str(cause) if cause is not None else "unknown failure"
        super().__init__(
            f"Node '{node_id}' ({node_type}) failed: {reason}",
            node_id=node_id,
            node_type=node_type,
            **context,
        )
        self.node_id = node_id
        self.node_type = node_type
        self.cause = cause

    @property
    def status_code(self) -> int:  # type: ignore[override]
        """Propagate the cause's HTTP status when it is an orchestration error."""
        if isinstance(self.cause, OrchestrationError):
            return self.cause.status_code
        return 500

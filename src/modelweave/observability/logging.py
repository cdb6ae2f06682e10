"""Structured logging configuration with run ID support.

This module sets up structured logging using structlog and injects the
current run ID (one strategy call, chain execution or API request) into
every event so that concurrent fan-out calls can be correlated.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Optional, TextIO

import structlog

# Context variable holding the run ID of the current logical operation
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def add_run_id(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add run ID to log event if available."""
    run_id = run_id_var.get()
    if run_id:
        event_dict["run_id"] = run_id
    return event_dict


def setup_logging(
    log_level: str = "INFO", json_logs: bool = True, stream: Optional[TextIO] = None
) -> None:
    """Configure structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output logs in JSON format; otherwise use console format
        stream: Log destination (stdout by default; the CLI logs to stderr so
            command output stays machine readable)

    Example:
        >>> setup_logging(log_level="INFO", json_logs=False)
        >>> get_logger(__name__).info("catalog_loaded", providers=4)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        add_run_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.processors.ExceptionPrettyPrinter(), structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def new_run_id() -> str:
    """Generate a fresh run identifier."""
    return uuid.uuid4().hex[:16]


def set_run_id(run_id: Optional[str]) -> None:
    """Set the run ID for the current context."""
    run_id_var.set(run_id)


def get_run_id() -> Optional[str]:
    """Get the run ID for the current context."""
    return run_id_var.get()


def ensure_run_id() -> str:
    """Return the current run ID, creating one if the context has none."""
    run_id = run_id_var.get()
    if run_id is None:
        run_id = new_run_id()
        run_id_var.set(run_id)
    return run_id

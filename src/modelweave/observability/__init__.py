"""Observability module for logging and metrics.

This module provides:
- Structured logging with per-run IDs
- Prometheus metrics for provider calls, strategies and chain runs
"""

from modelweave.observability.logging import (
    ensure_run_id,
    get_logger,
    get_run_id,
    new_run_id,
    set_run_id,
    setup_logging,
)
from modelweave.observability.metrics import MetricsCollector, get_metrics_collector

__all__ = [
    "MetricsCollector",
    "ensure_run_id",
    "get_logger",
    "get_metrics_collector",
    "get_run_id",
    "new_run_id",
    "set_run_id",
    "setup_logging",
]

"""Prometheus metrics for provider calls, strategies and chain runs."""

from typing import Optional

from prometheus_client import Counter, Histogram, generate_latest

provider_calls_total = Counter(
    "modelweave_provider_calls_total",
    "Total number of routed provider calls",
    labelnames=["provider_id", "model_id", "outcome"],
)

provider_call_duration_seconds = Histogram(
    "modelweave_provider_call_duration_seconds",
    "Provider call duration in seconds",
    labelnames=["provider_id"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

rate_limit_rejections_total = Counter(
    "modelweave_rate_limit_rejections_total",
    "Calls rejected by admission control",
    labelnames=["provider_id", "reason"],
)

provider_cost_usd_total = Counter(
    "modelweave_provider_cost_usd_total",
    "Accrued provider cost in USD",
    labelnames=["provider_id"],
)

strategy_runs_total = Counter(
    "modelweave_strategy_runs_total",
    "Multi-model strategy runs",
    labelnames=["strategy", "outcome"],
)

chain_runs_total = Counter(
    "modelweave_chain_runs_total",
    "Chain graph executions",
    labelnames=["outcome"],
)

chain_node_evaluations_total = Counter(
    "modelweave_chain_node_evaluations_total",
    "Chain node evaluations",
    labelnames=["node_type", "outcome"],
)

http_requests_total = Counter(
    "modelweave_http_requests_total",
    "Total number of API requests",
    labelnames=["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "modelweave_http_request_duration_seconds",
    "API request duration in seconds",
    labelnames=["method", "endpoint"],
)


class MetricsCollector:
    """Records orchestration events into the Prometheus registry.

    Example:
        >>> collector = get_metrics_collector()
        >>> collector.record_provider_call("openai", "gpt-4o", "success", 1.2)
    """

    def record_provider_call(
        self, provider_id: str, model_id: str, outcome: str, duration_seconds: float
    ) -> None:
        """Record one attempted provider call.

        Args:
            provider_id: Provider that was called
            model_id: Model that was called
            outcome: success, error or timeout
            duration_seconds: Call duration
        """
        provider_calls_total.labels(
            provider_id=provider_id, model_id=model_id, outcome=outcome
        ).inc()
        provider_call_duration_seconds.labels(provider_id=provider_id).observe(duration_seconds)

    def record_rate_limited(self, provider_id: str, reason: Optional[str] = None) -> None:
        rate_limit_rejections_total.labels(
            provider_id=provider_id, reason=reason or "requests"
        ).inc()

    def record_cost(self, provider_id: str, cost: float) -> None:
        if cost > 0:
            provider_cost_usd_total.labels(provider_id=provider_id).inc(cost)

    def record_strategy_run(self, strategy: str, success: bool) -> None:
        strategy_runs_total.labels(
            strategy=strategy, outcome="success" if success else "failure"
        ).inc()

    def record_chain_run(self, success: bool) -> None:
        chain_runs_total.labels(outcome="success" if success else "failure").inc()

    def record_node_evaluation(self, node_type: str, success: bool) -> None:
        chain_node_evaluations_total.labels(
            node_type=node_type, outcome="success" if success else "failure"
        ).inc()

    def record_http_request(
        self, method: str, endpoint: str, status_code: int, duration_seconds: float
    ) -> None:
        http_requests_total.labels(
            method=method, endpoint=endpoint, status_code=str(status_code)
        ).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
            duration_seconds
        )

    def generate_metrics(self) -> bytes:
        """Generate metrics in Prometheus exposition format."""
        return generate_latest()


_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Get the process-wide metrics collector.

    Prometheus metrics are process-global, so a single collector wraps them.
    """
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector

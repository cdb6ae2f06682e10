"""Provider usage statistics and health status."""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ProviderStatus(str, Enum):
    """Health classification derived from the observed success rate."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    DOWN = "down"


@dataclass
class ProviderUsageStats:
    """Observed call outcomes for one provider.

    Attributes:
        provider_id: Provider identifier
        requests: Calls attempted (including failures, excluding rate-limit rejections)
        errors: Calls that failed at the provider
        rate_limit_hits: Calls rejected by admission control
        avg_latency_ms: Running mean latency of attempted calls
        last_used: Timestamp of the most recent attempt
    """

    provider_id: str
    requests: int = 0
    errors: int = 0
    rate_limit_hits: int = 0
    avg_latency_ms: float = 0.0
    last_used: Optional[datetime] = None
    _latency_total: float = field(default=0.0, repr=False)

    @property
    def error_rate(self) -> float:
        return self.errors / max(self.requests, 1)

    @property
    def success_rate(self) -> float:
        """Success percentage, 100 when nothing has been attempted."""
        if self.requests == 0:
            return 100.0
        return (self.requests - self.errors) / self.requests * 100

    @property
    def status(self) -> ProviderStatus:
        if self.success_rate > 95:
            return ProviderStatus.HEALTHY
        if self.success_rate > 80:
            return ProviderStatus.DEGRADED
        return ProviderStatus.DOWN


class UsageTracker:
    """Thread-safe collector of per-provider call outcomes."""

    def __init__(self) -> None:
        self._stats: dict[str, ProviderUsageStats] = {}
        self._lock = threading.Lock()

    def _get(self, provider_id: str) -> ProviderUsageStats:
        stats = self._stats.get(provider_id)
        if stats is None:
            stats = ProviderUsageStats(provider_id=provider_id)
            self._stats[provider_id] = stats
        return stats

    def record_call(self, provider_id: str, latency_ms: float, success: bool) -> None:
        """Record an attempted call.

        Args:
            provider_id: Provider that was called
            latency_ms: Elapsed time of the attempt
            success: Whether the provider returned a usable response
        """
        with self._lock:
            stats = self._get(provider_id)
            stats.requests += 1
            if not success:
                stats.errors += 1
            stats._latency_total += max(0.0, latency_ms)
            stats.avg_latency_ms = stats._latency_total / stats.requests
            stats.last_used = datetime.now(timezone.utc)

    def record_rate_limited(self, provider_id: str) -> None:
        """Record a call rejected by admission control."""
        with self._lock:
            self._get(provider_id).rate_limit_hits += 1

    def get(self, provider_id: str) -> ProviderUsageStats:
        """Get a snapshot of a provider's statistics."""
        with self._lock:
            stats = self._get(provider_id)
            return ProviderUsageStats(
                provider_id=stats.provider_id,
                requests=stats.requests,
                errors=stats.errors,
                rate_limit_hits=stats.rate_limit_hits,
                avg_latency_ms=stats.avg_latency_ms,
                last_used=stats.last_used,
                _latency_total=stats._latency_total,
            )

    def status(self, provider_id: str) -> ProviderStatus:
        return self.get(provider_id).status

    def error_rate(self, provider_id: str) -> float:
        return self.get(provider_id).error_rate

    def all(self) -> list[ProviderUsageStats]:
        """Snapshots for every provider seen so far."""
        with self._lock:
            provider_ids = list(self._stats)
        return [self.get(provider_id) for provider_id in provider_ids]

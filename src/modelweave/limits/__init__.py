"""Admission control, cost accounting and usage statistics.

These are the only hot-path mutable components shared by every concurrent
call path; each keeps per-provider locks.
"""

from modelweave.limits.cost import (
    CostAccountant,
    ProviderCostSummary,
    calculate_cost,
    estimate_cost,
    estimate_prompt_tokens,
)
from modelweave.limits.rate_limiter import Admission, RateLimiter, RateWindow
from modelweave.limits.usage import ProviderStatus, ProviderUsageStats, UsageTracker

__all__ = [
    "Admission",
    "CostAccountant",
    "ProviderCostSummary",
    "ProviderStatus",
    "ProviderUsageStats",
    "RateLimiter",
    "RateWindow",
    "UsageTracker",
    "calculate_cost",
    "estimate_cost",
    "estimate_prompt_tokens",
]

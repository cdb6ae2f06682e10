"""Cost accounting for provider usage.

This module prices token usage against a provider's per-1k pricing and keeps
a running, monotonically increasing cost ledger per provider. It also
provides the pre-call estimation helpers used by best-fit selection.
"""

import threading
from dataclasses import dataclass
from typing import Optional

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.models import Pricing
from modelweave.errors import ProviderNotRegisteredError
from modelweave.models import Usage
from modelweave.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ProviderCostSummary:
    """Running totals for one provider.

    Attributes:
        total_cost: Accrued cost in USD
        prompt_tokens: Prompt tokens billed
        completion_tokens: Completion tokens billed
        call_count: Successful calls recorded
    """

    total_cost: float = 0.0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    call_count: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


def calculate_cost(pricing: Pricing, usage: Usage) -> float:
    """Price a usage report.

    ``cost = prompt/1000 * input_per_1k + completion/1000 * output_per_1k``.
    Negative token counts are treated as zero, so the result is never negative.

    Args:
        pricing: Provider pricing
        usage: Token usage

    Returns:
        Cost in USD

    Example:
        >>> calculate_cost(Pricing(input_per_1k=0.005, output_per_1k=0.015), Usage.of(1000, 500))
        0.0125
    """
    prompt = max(0, usage.prompt_tokens)
    completion = max(0, usage.completion_tokens)
    return (prompt / 1000) * pricing.input_per_1k + (completion / 1000) * pricing.output_per_1k


def estimate_prompt_tokens(text: str) -> int:
    """Estimate token count from text.

    This uses a simple approximation: 1 token ~ 4 characters.

    Example:
        >>> estimate_prompt_tokens("Hello world")
        2
    """
    return max(1, len(text) // 4)


def estimate_cost(pricing: Pricing, prompt_tokens: int, max_tokens: int) -> float:
    """Conservative pre-call cost estimate.

    Output tokens are estimated as half of ``max_tokens``.
    """
    return calculate_cost(pricing, Usage.of(prompt_tokens, max(1, max_tokens // 2)))


class CostAccountant:
    """Per-provider cost ledger.

    Recording never fails and never decreases a ledger. Each provider's
    summary is guarded by its own lock.

    Example:
        >>> accountant = CostAccountant(catalog)
        >>> accountant.record("openai", Usage.of(1000, 500))
        0.0125
        >>> accountant.total("openai")
        0.0125
    """

    def __init__(self, catalog: ProviderCatalog) -> None:
        """Initialize cost accountant.

        Args:
            catalog: Catalog that supplies each provider's pricing
        """
        self._catalog = catalog
        self._summaries: dict[str, ProviderCostSummary] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _entry(self, provider_id: str) -> tuple[threading.Lock, ProviderCostSummary]:
        with self._registry_lock:
            lock = self._locks.get(provider_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[provider_id] = lock
                self._summaries[provider_id] = ProviderCostSummary()
            return lock, self._summaries[provider_id]

    def record(self, provider_id: str, usage: Usage, pricing: Optional[Pricing] = None) -> float:
        """Price a usage report and add it to the provider's ledger.

        Args:
            provider_id: Provider that served the call
            usage: Reported token usage
            pricing: Pricing override (defaults to the catalog's pricing)

        Returns:
            Cost added to the ledger. A provider missing from the catalog is
            priced at zero; its tokens are still counted.
        """
        if pricing is None:
            try:
                pricing = self._catalog.get_provider(provider_id).pricing
            except ProviderNotRegisteredError:
                logger.warning("cost_unpriced_provider", provider_id=provider_id)
                pricing = Pricing()
        cost = calculate_cost(pricing, usage)

        lock, summary = self._entry(provider_id)
        with lock:
            summary.total_cost += cost
            summary.prompt_tokens += max(0, usage.prompt_tokens)
            summary.completion_tokens += max(0, usage.completion_tokens)
            summary.call_count += 1

        return cost

    def total(self, provider_id: str) -> float:
        """Get accrued cost for a provider (0.0 if nothing was recorded)."""
        return self.summary(provider_id).total_cost

    def summary(self, provider_id: str) -> ProviderCostSummary:
        """Get a snapshot of a provider's running totals."""
        with self._registry_lock:
            lock = self._locks.get(provider_id)
            summary = self._summaries.get(provider_id)
        if lock is None or summary is None:
            return ProviderCostSummary()
        with lock:
            return ProviderCostSummary(
                total_cost=summary.total_cost,
                prompt_tokens=summary.prompt_tokens,
                completion_tokens=summary.completion_tokens,
                call_count=summary.call_count,
            )

    def totals(self) -> dict[str, float]:
        """Get accrued cost for every provider that has recorded usage."""
        with self._registry_lock:
            provider_ids = list(self._summaries)
        return {provider_id: self.total(provider_id) for provider_id in provider_ids}

    def grand_total(self) -> float:
        """Get accrued cost across all providers."""
        return sum(self.totals().values())

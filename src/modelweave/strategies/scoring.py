"""Response scoring used to rank strategy results.

A response's score combines four weighted factors:

- speed (0.3): ``5000 / max(latency_ms, 100)``
- length (0.2): ``min(len(content) / 100, 10)``
- cost efficiency (0.2): ``1 / max(cost + 0.001, 0.001)``
- provider capability count (0.3): enabled streaming/vision/tools flags
"""

from typing import Callable, Optional

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.errors import ProviderNotRegisteredError
from modelweave.models import Response

SPEED_WEIGHT = 0.3
LENGTH_WEIGHT = 0.2
COST_WEIGHT = 0.2
CAPABILITY_WEIGHT = 0.3

CapabilityLookup = Callable[[str], int]


def score_response(response: Response, capability_count: int = 0) -> float:
    """Score a single response.

    Args:
        response: Response to score
        capability_count: Number of capabilities of the serving provider

    Returns:
        Score, higher is better
    """
    speed = 5000 / max(response.latency_ms, 100)
    length = min(len(response.content) / 100, 10)
    cost_efficiency = 1 / max(response.cost + 0.001, 0.001)
    return (
        speed * SPEED_WEIGHT
        + length * LENGTH_WEIGHT
        + cost_efficiency * COST_WEIGHT
        + capability_count * CAPABILITY_WEIGHT
    )


def catalog_capabilities(catalog: ProviderCatalog) -> CapabilityLookup:
    """Build a capability lookup backed by a catalog.

    Providers that are no longer registered count as having no capabilities.
    """

    def lookup(provider_id: str) -> int:
        try:
            return catalog.get_provider(provider_id).capabilities.count
        except ProviderNotRegisteredError:
            return 0

    return lookup


def rank_responses(
    responses: list[Response], capabilities: Optional[CapabilityLookup] = None
) -> list[Response]:
    """Sort responses by descending score.

    The sort is stable, so equal scores keep their original order.
    """
    lookup = capabilities or (lambda provider_id: 0)
    return sorted(
        responses,
        key=lambda response: score_response(response, lookup(response.provider_id)),
        reverse=True,
    )


def select_best(
    responses: list[Response], capabilities: Optional[CapabilityLookup] = None
) -> Optional[Response]:
    """Return the highest scoring response, or None for an empty list."""
    if not responses:
        return None
    return rank_responses(responses, capabilities)[0]

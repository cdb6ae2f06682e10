"""Tests for response scoring."""

import pytest

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.models import Response
from modelweave.strategies.scoring import (
    catalog_capabilities,
    rank_responses,
    score_response,
    select_best,
)


def _response(
    content: str = "x" * 100,
    latency_ms: float = 1000.0,
    cost: float = 0.0,
    provider_id: str = "alpha",
    model_id: str = "m",
) -> Response:
    return Response(
        content=content,
        latency_ms=latency_ms,
        cost=cost,
        provider_id=provider_id,
        model_id=model_id,
    )


def test_score_components() -> None:
    # speed 5000/1000*0.3 + length 1*0.2 + cost 1/0.001*0.2 + caps 2*0.3
    score = score_response(_response(), capability_count=2)

    assert score == pytest.approx(1.5 + 0.2 + 200.0 + 0.6)


def test_latency_floor_and_length_cap() -> None:
    fast = score_response(_response(content="x" * 5000, latency_ms=1.0))

    assert fast == pytest.approx(50 * 0.3 + 10 * 0.2 + 1000 * 0.2)


def test_cheaper_response_scores_higher() -> None:
    assert score_response(_response(cost=0.0)) > score_response(_response(cost=0.01))


def test_rank_is_stable_for_ties() -> None:
    responses = [_response(model_id="a"), _response(model_id="b"), _response(model_id="c")]

    assert [r.model_id for r in rank_responses(responses)] == ["a", "b", "c"]


def test_capabilities_break_ties(catalog: ProviderCatalog) -> None:
    responses = [
        _response(provider_id="gamma", model_id="m4"),
        _response(provider_id="beta", model_id="m3"),
    ]

    best = select_best(responses, catalog_capabilities(catalog))

    assert best.model_id == "m3"


def test_unregistered_provider_counts_no_capabilities(catalog: ProviderCatalog) -> None:
    lookup = catalog_capabilities(catalog)

    assert lookup("beta") == 3
    assert lookup("retired") == 0


def test_select_best_empty() -> None:
    assert select_best([]) is None

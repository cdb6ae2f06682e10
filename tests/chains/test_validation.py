"""Tests for chain execution planning."""

import pytest

from modelweave.chains.models import ChainGraph
from modelweave.chains.validation import build_plan, validate_graph
from modelweave.errors import CyclicGraphError


def _graph(node_ids: list[str], edges: list[tuple[str, str]]) -> ChainGraph:
    return ChainGraph.from_dict(
        {
            "nodes": [{"id": node_id, "type": "prompt"} for node_id in node_ids],
            "edges": [{"source": s, "target": t} for s, t in edges],
        }
    )


def test_order_respects_edges() -> None:
    graph = _graph(["c", "b", "a"], [("a", "b"), ("b", "c")])

    assert validate_graph(graph) == ["a", "b", "c"]


def test_ties_follow_declaration_order() -> None:
    graph = _graph(["x", "y", "z", "join"], [("z", "join"), ("x", "join")])

    assert validate_graph(graph) == ["x", "y", "z", "join"]


def test_levels_group_by_depth() -> None:
    graph = _graph(
        ["a", "b", "c", "d"],
        [("a", "c"), ("b", "c"), ("c", "d"), ("a", "d")],
    )

    plan = build_plan(graph)

    assert [[plan.nodes[p].id for p in level] for level in plan.levels] == [
        ["a", "b"],
        ["c"],
        ["d"],
    ]
    assert plan.is_sink(plan.index["d"])
    assert not plan.is_sink(plan.index["a"])


def test_incoming_edges_keep_declaration_order() -> None:
    graph = _graph(["a", "b", "m"], [("b", "m"), ("a", "m")])

    plan = build_plan(graph)

    sources = [plan.nodes[plan.sources[e]].id for e in plan.incoming[plan.index["m"]]]
    assert sources == ["b", "a"]


def test_cycle_detected() -> None:
    graph = _graph(["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "b"), ("c", "d")])

    with pytest.raises(CyclicGraphError) as exc_info:
        validate_graph(graph)

    assert exc_info.value.node_ids == ["b", "c", "d"]
    assert exc_info.value.error_code == "CYCLIC_GRAPH"


def test_self_loop_is_a_cycle() -> None:
    with pytest.raises(CyclicGraphError):
        validate_graph(_graph(["a"], [("a", "a")]))

"""Execution planning for chain graphs.

Nodes are addressed by their declaration index. The plan holds adjacency
lists over those indices, a deterministic topological order and the
dependency levels used for concurrent execution.
"""

import heapq
from dataclasses import dataclass, field

from modelweave.chains.models import ChainGraph, ChainNode, GraphEdge
from modelweave.errors import CyclicGraphError


@dataclass
class ExecutionPlan:
    """Index-addressed view of a validated, acyclic graph.

    Attributes:
        nodes: Nodes in declaration order
        edges: Edges in declaration order
        index: Node id to declaration index
        incoming: Per node, indices into ``edges`` of its incoming edges, in
            edge declaration order
        outgoing: Per node, indices into ``edges`` of its outgoing edges
        sources: Per edge, index of its source node
        order: Topological order (ties broken by declaration order)
        levels: Nodes grouped by dependency depth; a node's level is one more
            than the deepest of its predecessors
    """

    nodes: list[ChainNode]
    edges: list[GraphEdge]
    index: dict[str, int]
    incoming: list[list[int]] = field(default_factory=list)
    outgoing: list[list[int]] = field(default_factory=list)
    sources: list[int] = field(default_factory=list)
    order: list[int] = field(default_factory=list)
    levels: list[list[int]] = field(default_factory=list)

    def is_sink(self, node_index: int) -> bool:
        return not self.outgoing[node_index]


def build_plan(graph: ChainGraph) -> ExecutionPlan:
    """Compute the execution plan of a graph.

    Uses Kahn's algorithm; nodes left over once no zero in-degree node
    remains lie on (or downstream of) a cycle.

    Args:
        graph: Structurally valid graph

    Returns:
        ExecutionPlan

    Raises:
        CyclicGraphError: If the graph contains a cycle
    """
    nodes = list(graph.nodes)
    edges = list(graph.edges)
    index = {node.id: position for position, node in enumerate(nodes)}

    plan = ExecutionPlan(
        nodes=nodes,
        edges=edges,
        index=index,
        incoming=[[] for _ in nodes],
        outgoing=[[] for _ in nodes],
    )

    in_degree = [0] * len(nodes)
    for edge_index, edge in enumerate(edges):
        source, target = index[edge.source], index[edge.target]
        plan.sources.append(source)
        plan.outgoing[source].append(edge_index)
        plan.incoming[target].append(edge_index)
        in_degree[target] += 1

    ready = [position for position, degree in enumerate(in_degree) if degree == 0]
    heapq.heapify(ready)
    depth = [0] * len(nodes)

    while ready:
        current = heapq.heappop(ready)
        plan.order.append(current)
        for edge_index in plan.outgoing[current]:
            target = index[edges[edge_index].target]
            depth[target] = max(depth[target], depth[current] + 1)
            in_degree[target] -= 1
            if in_degree[target] == 0:
                heapq.heappush(ready, target)

    if len(plan.order) != len(nodes):
        ordered = set(plan.order)
        raise CyclicGraphError(
            [node.id for position, node in enumerate(nodes) if position not in ordered]
        )

    for position in sorted(plan.order, key=lambda p: (depth[p], p)):
        if depth[position] == len(plan.levels):
            plan.levels.append([])
        plan.levels[depth[position]].append(position)

    return plan


def validate_graph(graph: ChainGraph) -> list[str]:
    """Validate a graph and return its node ids in execution order.

    Raises:
        CyclicGraphError: If the graph contains a cycle
    """
    plan = build_plan(graph)
    return [plan.nodes[position].id for position in plan.order]

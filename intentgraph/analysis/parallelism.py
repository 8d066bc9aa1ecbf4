"""Find pairs of nodes that could run concurrently.

This is a deliberately cheap heuristic: two nodes qualify when no edge joins
them directly. Transitive dependencies are not considered, so A and C in
A -> B -> C are still reported.
"""

from dataclasses import dataclass

from intentgraph.models.intent_graph import IntentGraph

# assumed duration of a node without an estimate
DEFAULT_DURATION_MS = 1000

MAX_OPPORTUNITIES = 5

PARALLEL_REASON = "Nodes have no dependencies and can execute in parallel"


@dataclass
class ParallelOpportunity:
    """Two nodes without a direct edge between them."""

    nodes: list[str]
    potential_savings_ms: float
    reason: str = PARALLEL_REASON


def find_parallel_opportunities(graph: IntentGraph) -> list[ParallelOpportunity]:
    """Pairs of nodes with no direct edge in either direction.

    Pairs are enumerated (i, j), i < j, in node declaration order and the
    first ``MAX_OPPORTUNITIES`` are returned. The result is not sorted by
    savings.
    """
    linked = {(edge.from_node, edge.to_node) for edge in graph.edges}
    opportunities: list[ParallelOpportunity] = []

    for i, first in enumerate(graph.nodes):
        for second in graph.nodes[i + 1:]:
            a, b = first.node_id, second.node_id
            if (a, b) in linked or (b, a) in linked:
                continue
            savings = min(
                first.duration_or(DEFAULT_DURATION_MS),
                second.duration_or(DEFAULT_DURATION_MS),
            )
            opportunities.append(ParallelOpportunity(nodes=[a, b], potential_savings_ms=savings))
            if len(opportunities) == MAX_OPPORTUNITIES:
                return opportunities

    return opportunities

"""Size and shape metrics for intent graphs."""

from collections import Counter
from dataclasses import dataclass

from intentgraph.models.intent_graph import AgentType, Edge, IntentGraph, Node, NodeType

# agents whose calls go out over the network
_REMOTE_AGENT_TYPES = {AgentType.llm, AgentType.api}


@dataclass
class ComplexityMetrics:
    """Size/shape metrics of a graph."""

    node_count: int
    edge_count: int
    depth: int  # nodes on the longest simple path
    width: int  # largest out-degree
    complexity_score: int  # cyclomatic: edges - nodes + 2, floored at 0


@dataclass
class ResourceEstimates:
    """Totals over every node, regardless of which ones actually run."""

    estimated_duration_ms: float
    estimated_cost: float
    estimated_api_calls: int


def calculate_complexity(nodes: list[Node], edges: list[Edge]) -> ComplexityMetrics:
    """Compute count, depth, width and cyclomatic score.

    Depth is measured from nodes typed ``entry`` (or from the first node when
    none is) along simple paths only, so a cycle cannot make it diverge.
    """
    node_count = len(nodes)
    edge_count = len(edges)

    out_degree = Counter(edge.from_node for edge in edges)
    width = max(out_degree.values(), default=1)

    return ComplexityMetrics(
        node_count=node_count,
        edge_count=edge_count,
        depth=_longest_path_length(nodes, edges),
        width=width,
        complexity_score=max(0, edge_count - node_count + 2),
    )


def _longest_path_length(nodes: list[Node], edges: list[Edge]) -> int:
    if not nodes:
        return 0

    known = {node.node_id for node in nodes}
    adjacency: dict[str, list[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.from_node, []).append(edge.to_node)

    starts = [node.node_id for node in nodes if node.node_type == NodeType.entry]
    if not starts:
        starts = [nodes[0].node_id]

    longest = 0
    for start in dict.fromkeys(starts):
        path = [start]
        on_path = {start}
        pending = [iter(adjacency.get(start, []))]
        longest = max(longest, 1)
        while pending:
            nxt = next(pending[-1], None)
            if nxt is None:
                on_path.discard(path.pop())
                pending.pop()
            elif nxt in known and nxt not in on_path:
                path.append(nxt)
                on_path.add(nxt)
                pending.append(iter(adjacency.get(nxt, [])))
                longest = max(longest, len(path))
    return longest


def estimate_resources(graph: IntentGraph) -> ResourceEstimates:
    """Sum per-node duration and cost estimates; unestimated nodes count as 0."""
    return ResourceEstimates(
        estimated_duration_ms=sum(node.duration_or(0) for node in graph.nodes),
        estimated_cost=sum(node.cost_estimate or 0 for node in graph.nodes),
        estimated_api_calls=sum(1 for node in graph.nodes if node.agent_type in _REMOTE_AGENT_TYPES),
    )

"""Plain-language improvement suggestions for a graph."""

from intentgraph.analysis.bottlenecks import identify_bottlenecks
from intentgraph.analysis.parallelism import find_parallel_opportunities
from intentgraph.models.intent_graph import IntentGraph

WELL_OPTIMIZED = "Graph is well-optimized - no improvements suggested"


def suggest_improvements(graph: IntentGraph) -> list[str]:
    """List what could be improved, or a single line saying nothing could."""
    suggestions: list[str] = []

    opportunities = find_parallel_opportunities(graph)
    if opportunities:
        suggestions.append(
            f"Found {len(opportunities)} opportunities to run independent nodes in parallel"
        )

    without_error_handling = [n for n in graph.nodes if n.error_handling is None]
    if without_error_handling:
        suggestions.append(f"{len(without_error_handling)} nodes lack error handling strategies")

    without_timeout = [
        n for n in graph.nodes
        if n.configuration is None or n.configuration.timeout_ms is None
    ]
    if without_timeout:
        suggestions.append(f"{len(without_timeout)} nodes lack timeout configuration")

    connected = {e.from_node for e in graph.edges} | {e.to_node for e in graph.edges}
    disconnected = [n.node_id for n in graph.nodes if n.node_id not in connected]
    if graph.nodes and not graph.edges:
        suggestions.append("Graph has nodes but no edges - nodes are disconnected")
    elif disconnected:
        suggestions.append(f"Nodes with no edges: {', '.join(disconnected)}")

    bottlenecks = identify_bottlenecks(graph)
    if bottlenecks:
        flagged = sorted({b.node_id for b in bottlenecks})
        suggestions.append(
            f"{len(bottlenecks)} bottleneck(s) detected at: {', '.join(flagged)}"
        )

    if not suggestions:
        suggestions.append(WELL_OPTIMIZED)
    return suggestions

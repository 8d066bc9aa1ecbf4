"""Longest duration-weighted path from the entry points to a leaf."""

from dataclasses import dataclass, field

from intentgraph.analysis.parallelism import DEFAULT_DURATION_MS
from intentgraph.errors import CycleDetectedError
from intentgraph.models.intent_graph import IntentGraph, Node


@dataclass
class CriticalPath:
    path: list[str] = field(default_factory=list)
    total_duration_ms: float = 0


def calculate_critical_path(graph: IntentGraph) -> CriticalPath:
    """Walk every path from each execution-plan entry point and keep the slowest.

    Each node adds its estimated duration (``DEFAULT_DURATION_MS`` when it has
    none). A path is complete at a node with no outgoing edges; the first
    complete path with the largest total wins. Branches that lead to an
    unknown node id are dropped.

    Raises:
        CycleDetectedError: if a walk reaches a node already on its own path.
    """
    nodes_by_id: dict[str, Node] = {}
    for node in graph.nodes:
        nodes_by_id.setdefault(node.node_id, node)
    adjacency = graph.successors()

    best: CriticalPath | None = None

    for entry in graph.execution_plan.entry_points:
        # totals[i] is the running total at path[i]; pending[i + 1] holds its unvisited targets
        path: list[str] = []
        totals: list[float] = []
        pending = [iter([entry])]
        while pending:
            node_id = next(pending[-1], None)
            if node_id is None:
                pending.pop()
                if path:
                    path.pop()
                    totals.pop()
                continue

            node = nodes_by_id.get(node_id)
            if node is None:
                continue
            if node_id in path:
                raise CycleDetectedError(path[path.index(node_id):] + [node_id])

            total = (totals[-1] if totals else 0) + node.duration_or(DEFAULT_DURATION_MS)
            path.append(node_id)
            totals.append(total)

            targets = adjacency.get(node_id, [])
            if not targets and (best is None or total > best.total_duration_ms):
                best = CriticalPath(path=list(path), total_duration_ms=total)
            pending.append(iter(targets))

    return best or CriticalPath()

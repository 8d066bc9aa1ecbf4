"""Flag nodes likely to constrain throughput."""

from collections import Counter
from dataclasses import dataclass
from typing import Literal

from intentgraph.models.intent_graph import IntentGraph

LONG_DURATION_MS = 5000
FAN_THRESHOLD = 3

# Unlike the critical path, an unestimated node counts as 0 ms here, so the
# duration rule only ever fires on nodes that carry an estimate.
BOTTLENECK_DEFAULT_DURATION_MS = 0

Impact = Literal["high", "medium", "low"]


@dataclass
class Bottleneck:
    node_id: str
    reason: str
    impact: Impact


def identify_bottlenecks(graph: IntentGraph) -> list[Bottleneck]:
    """Apply the duration, fan-in and fan-out rules to every node.

    The rules are independent, so one node can be reported more than once.
    Output follows node declaration order, then rule order.
    """
    fan_in = Counter(edge.to_node for edge in graph.edges)
    fan_out = Counter(edge.from_node for edge in graph.edges)

    bottlenecks: list[Bottleneck] = []
    for node in graph.nodes:
        duration = node.duration_or(BOTTLENECK_DEFAULT_DURATION_MS)
        incoming = fan_in[node.node_id]
        outgoing = fan_out[node.node_id]

        if duration > LONG_DURATION_MS:
            bottlenecks.append(Bottleneck(
                node_id=node.node_id,
                reason=f"Long execution time ({duration}ms)",
                impact="high",
            ))
        if incoming > FAN_THRESHOLD:
            bottlenecks.append(Bottleneck(
                node_id=node.node_id,
                reason=f"High fan-in ({incoming} incoming edges)",
                impact="medium",
            ))
        if outgoing > FAN_THRESHOLD:
            bottlenecks.append(Bottleneck(
                node_id=node.node_id,
                reason=f"High fan-out ({outgoing} outgoing edges)",
                impact="medium",
            ))

    return bottlenecks

"""Intent graph analysis engine.

Validation, metrics and optimization for the agent workflow graphs produced
by the intent graph generator.
"""

from intentgraph.models.intent_graph import (
    Edge,
    ExecutionPlan,
    IntentGraph,
    Node,
)
from intentgraph.analysis import (
    analyze_graph,
    calculate_complexity,
    calculate_critical_path,
    find_parallel_opportunities,
    identify_bottlenecks,
    optimize_graph,
    validate_graph,
)
from intentgraph.export import export_graph, load_graph, parse_graph

__all__ = [
    # graph model
    "Edge",
    "ExecutionPlan",
    "IntentGraph",
    "Node",
    # analysis
    "analyze_graph",
    "calculate_complexity",
    "calculate_critical_path",
    "find_parallel_opportunities",
    "identify_bottlenecks",
    "optimize_graph",
    "validate_graph",
    # serialization
    "export_graph",
    "load_graph",
    "parse_graph",
]

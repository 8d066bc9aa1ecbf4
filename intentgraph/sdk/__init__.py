"""Enveloped operations for callers of the engine."""

from intentgraph.sdk.operations import (
    analyze_graph_tool,
    export_graph_tool,
    optimize_graph_tool,
    resolve_graph,
    store_graph_tool,
    suggest_improvements_tool,
    validate_graph_tool,
)

__all__ = [
    "analyze_graph_tool",
    "export_graph_tool",
    "optimize_graph_tool",
    "resolve_graph",
    "store_graph_tool",
    "suggest_improvements_tool",
    "validate_graph_tool",
]

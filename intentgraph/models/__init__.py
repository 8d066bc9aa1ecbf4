"""Core data models for intent graphs."""

from intentgraph.models.envelope import (
    ErrorDetail,
    ToolError,
    ToolResponse,
    ToolSuccess,
)
from intentgraph.models.stored_graph import StoredGraph, StoredGraphSummary
from intentgraph.models.intent_graph import (
    AgentType,
    BackoffStrategy,
    Edge,
    EdgeType,
    ErrorHandling,
    ErrorStrategy,
    ExecutionPlan,
    ExecutionStrategy,
    IntentGraph,
    Node,
    NodeConfiguration,
    NodeType,
    RetryPolicy,
)

__all__ = [
    # graph model
    "AgentType",
    "BackoffStrategy",
    "Edge",
    "EdgeType",
    "ErrorHandling",
    "ErrorStrategy",
    "ExecutionPlan",
    "ExecutionStrategy",
    "IntentGraph",
    "Node",
    "NodeConfiguration",
    "NodeType",
    "RetryPolicy",
    # persistence
    "StoredGraph",
    "StoredGraphSummary",
    # result envelope
    "ErrorDetail",
    "ToolError",
    "ToolResponse",
    "ToolSuccess",
]

"""Data model for persisted graphs.

Stores a validated graph under its lookup key, with timestamps, so it can be
analyzed again later without regenerating it.
"""

from pydantic import BaseModel

from intentgraph.models.intent_graph import IntentGraph


class StoredGraph(BaseModel):
    """a graph as kept by a persistent store."""

    key: str
    name: str | None = None
    graph: IntentGraph
    created_at: str
    updated_at: str


class StoredGraphSummary(BaseModel):
    """listing entry for a stored graph, without the graph body."""

    key: str
    name: str | None = None
    node_count: int
    edge_count: int
    created_at: str
    updated_at: str

"""API routes for storing and analyzing intent graphs.

Storage routes (``/graphs``, ``/graphs/{key}``) behave like a plain REST
resource. The analysis routes accept either an inline ``graph`` or the
``key`` of a stored one and always answer 200 with the result envelope.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from graph_server.graph_db import SqliteGraphStore
from intentgraph.errors import GraphValidationError
from intentgraph.export import load_graph
from intentgraph.models.envelope import ToolResponse
from intentgraph.models.stored_graph import StoredGraph, StoredGraphSummary
from intentgraph.sdk.operations import (
    analyze_graph_tool,
    export_graph_tool,
    optimize_graph_tool,
    store_graph_tool,
    suggest_improvements_tool,
    validate_graph_tool,
)

router = APIRouter()


class GraphRequest(BaseModel):
    """request body naming the graph to work on."""

    # raw payload: alias resolution and validation errors are reported in the envelope
    graph: dict[str, Any] | None = None
    key: str | None = None


class AnalyzeRequest(GraphRequest):
    analysis_types: list[str] | None = None


class OptimizeRequest(GraphRequest):
    strategies: list[str] | None = None


class ExportRequest(GraphRequest):
    format: str = "json"


def _store(request: Request) -> SqliteGraphStore:
    return request.app.state.graph_store


@router.get("/graphs")
def list_graphs(request: Request) -> list[StoredGraphSummary]:
    """list all stored graphs, most recently updated first."""
    return _store(request).list_records()


@router.post("/graphs")
def create_graph(request: Request, payload: dict[str, Any]) -> ToolResponse:
    """store a graph under a key derived from its content."""
    return store_graph_tool(payload, _store(request))


@router.get("/graphs/{key}")
def get_graph(request: Request, key: str) -> StoredGraph:
    record = _store(request).get_record(key)
    if not record:
        raise HTTPException(status_code=404, detail=f"Graph not found: {key}")
    return record


@router.put("/graphs/{key}")
def upsert_graph(request: Request, key: str, payload: dict[str, Any], name: str | None = None) -> StoredGraph:
    """create or update a stored graph.

    Uses PUT for idempotent upsert, so it is safe to call after every generation.
    """
    try:
        graph = load_graph(payload)
    except GraphValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.details) from exc

    store = _store(request)
    result = store.put(key, graph, name=name)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return store.get_record(key)


@router.delete("/graphs/{key}")
def delete_graph(request: Request, key: str) -> dict:
    if not _store(request).delete(key):
        raise HTTPException(status_code=404, detail=f"Graph not found: {key}")
    return {"deleted": key}


@router.post("/graphs/validate")
def validate(request: Request, body: GraphRequest) -> ToolResponse:
    return validate_graph_tool(body.graph, key=body.key, store=_store(request))


@router.post("/graphs/analyze")
def analyze(request: Request, body: AnalyzeRequest) -> ToolResponse:
    return analyze_graph_tool(
        body.graph, key=body.key, store=_store(request), analysis_types=body.analysis_types
    )


@router.post("/graphs/optimize")
def optimize(request: Request, body: OptimizeRequest) -> ToolResponse:
    return optimize_graph_tool(
        body.graph, key=body.key, store=_store(request), strategies=body.strategies
    )


@router.post("/graphs/suggest")
def suggest(request: Request, body: GraphRequest) -> ToolResponse:
    return suggest_improvements_tool(body.graph, key=body.key, store=_store(request))


@router.post("/graphs/export")
def export(request: Request, body: ExportRequest) -> ToolResponse:
    return export_graph_tool(body.graph, key=body.key, store=_store(request), fmt=body.format)

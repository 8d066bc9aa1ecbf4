"""Public operations, each wrapped in the result envelope.

These are the entry points used by the HTTP service and by anything else
that talks to the engine from outside. None of them raise: every outcome is
a ``ToolSuccess`` or a ``ToolError`` whose code says which stage failed.

A graph can be passed inline (an ``IntentGraph`` or a raw payload in either
historical schema shape) or looked up by key in a ``GraphStore``.
"""

import logging
from dataclasses import asdict
from typing import Any

from intentgraph.adapters.stores import GraphStore, StoreResult
from intentgraph.analysis.analyze_graph import analyze_graph, report_to_dict
from intentgraph.analysis.optimizer import optimize_graph
from intentgraph.analysis.suggestions import suggest_improvements
from intentgraph.analysis.validator import validate_graph
from intentgraph.errors import (
    ANALYSIS_ERROR,
    EXPORT_ERROR,
    OPTIMIZATION_ERROR,
    STORAGE_ERROR,
    VALIDATION_ERROR,
    GraphNotFoundError,
    IntentGraphError,
)
from intentgraph.export import export_graph, load_graph
from intentgraph.models.envelope import ErrorDetail, ToolError, ToolResponse, ToolSuccess
from intentgraph.models.intent_graph import IntentGraph
from intentgraph.utils.identifiers import generate_graph_key

logger = logging.getLogger(__name__)

GraphInput = IntentGraph | dict[str, Any] | None


def resolve_graph(
    graph: GraphInput = None,
    key: str | None = None,
    store: GraphStore | None = None,
) -> IntentGraph:
    """Return the inline graph if there is one, else the one stored under ``key``.

    Raises:
        GraphValidationError: if the inline payload is not a valid graph.
        GraphNotFoundError: if there is no inline graph and nothing under ``key``.
        StorageError: if the store itself fails.
    """
    if graph is not None:
        return graph if isinstance(graph, IntentGraph) else load_graph(graph)
    if key is not None and store is not None:
        found = store.get(key)
        if found is not None:
            return found
    raise GraphNotFoundError(key)


def _failure(exc: Exception, code: str, action: str) -> ToolError:
    """Turn an exception into a ToolError; ``code`` is used for unexpected ones."""
    if isinstance(exc, IntentGraphError):
        logger.info("failed to %s: [%s] %s", action, exc.code, exc.message)
        return ToolError(error=ErrorDetail(code=exc.code, message=exc.message, details=exc.details))

    logger.exception("unexpected error while trying to %s", action)
    return ToolError(error=ErrorDetail(
        code=code,
        message=str(exc) or f"Failed to {action}",
        details={"error": repr(exc)},
    ))


def validate_graph_tool(
    graph: GraphInput = None,
    *,
    key: str | None = None,
    store: GraphStore | None = None,
) -> ToolResponse:
    """Validate a graph. An invalid graph is still a successful call."""
    try:
        resolved = resolve_graph(graph, key, store)
        return ToolSuccess(result=asdict(validate_graph(resolved)))
    except Exception as exc:
        return _failure(exc, VALIDATION_ERROR, "validate graph")


def analyze_graph_tool(
    graph: GraphInput = None,
    *,
    key: str | None = None,
    store: GraphStore | None = None,
    analysis_types: list[str] | None = None,
) -> ToolResponse:
    try:
        resolved = resolve_graph(graph, key, store)
        return ToolSuccess(result=report_to_dict(analyze_graph(resolved, analysis_types)))
    except Exception as exc:
        return _failure(exc, ANALYSIS_ERROR, "analyze graph")


def optimize_graph_tool(
    graph: GraphInput = None,
    *,
    key: str | None = None,
    store: GraphStore | None = None,
    strategies: list[str] | None = None,
) -> ToolResponse:
    try:
        resolved = resolve_graph(graph, key, store)
        optimized = optimize_graph(resolved, strategies)
        return ToolSuccess(result={
            "optimized_graph": optimized.optimized_graph.model_dump(mode="json"),
            "optimizations_applied": [asdict(r) for r in optimized.optimizations_applied],
            "improvements": asdict(optimized.improvements),
        })
    except Exception as exc:
        return _failure(exc, OPTIMIZATION_ERROR, "optimize graph")


def suggest_improvements_tool(
    graph: GraphInput = None,
    *,
    key: str | None = None,
    store: GraphStore | None = None,
) -> ToolResponse:
    try:
        suggestions = suggest_improvements(resolve_graph(graph, key, store))
        return ToolSuccess(result={"suggestions": suggestions, "count": len(suggestions)})
    except Exception as exc:
        return _failure(exc, ANALYSIS_ERROR, "suggest improvements")


def export_graph_tool(
    graph: GraphInput = None,
    *,
    key: str | None = None,
    store: GraphStore | None = None,
    fmt: str = "json",
) -> ToolResponse:
    try:
        content = export_graph(resolve_graph(graph, key, store), fmt)
        return ToolSuccess(result={"format": fmt, "content": content})
    except Exception as exc:
        return _failure(exc, EXPORT_ERROR, "export graph")


def store_graph_tool(
    graph: GraphInput,
    store: GraphStore,
    key: str | None = None,
) -> ToolResponse:
    """Save a graph and hand it back.

    When no key is given one is derived from the graph content. A store
    failure does not fail the call; it is reported under ``result["storage"]``.
    """
    try:
        resolved = resolve_graph(graph)
    except Exception as exc:
        return _failure(exc, VALIDATION_ERROR, "read graph")

    payload = resolved.model_dump(mode="json")
    key = key or generate_graph_key(payload)
    try:
        stored = store.put(key, resolved)
    except Exception as exc:
        logger.exception("graph store raised while storing %s", key)
        stored = StoreResult(success=False, key=key, error=f"{STORAGE_ERROR}: {exc}")

    return ToolSuccess(result={"key": key, "graph": payload, "storage": asdict(stored)})

"""Serialize intent graphs to JSON or YAML and read them back.

Exports always use the canonical field names, so a graph that arrived in
either historical shape comes back out in one shape.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from intentgraph.errors import GraphValidationError, UnsupportedFormatError
from intentgraph.models.intent_graph import IntentGraph

FORMATS = ["json", "yaml"]


def load_graph(data: Any) -> IntentGraph:
    """Validate a decoded payload into an IntentGraph.

    Raises:
        GraphValidationError: with pydantic's error list under ``details["errors"]``.
    """
    try:
        return IntentGraph.model_validate(data)
    except ValidationError as exc:
        raise GraphValidationError(
            f"Invalid intent graph payload ({exc.error_count()} error(s))",
            {"errors": json.loads(exc.json(include_url=False))},
        ) from exc


def export_graph(graph: IntentGraph, fmt: str = "json") -> str:
    """Render a graph as JSON or YAML text."""
    if fmt == "json":
        return graph.model_dump_json(indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(graph.model_dump(mode="json"), sort_keys=False)
    raise UnsupportedFormatError(fmt, FORMATS)


def parse_graph(text: str, fmt: str = "json") -> IntentGraph:
    """Parse JSON or YAML text produced by ``export_graph`` (or by a generator)."""
    try:
        if fmt == "json":
            data = json.loads(text)
        elif fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            raise UnsupportedFormatError(fmt, FORMATS)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise GraphValidationError(f"Could not parse {fmt} graph: {exc}") from exc
    return load_graph(data)


def load_graph_file(path: Path | str) -> IntentGraph:
    """Read a graph file, choosing the format from its suffix."""
    path = Path(path)
    fmt = "yaml" if path.suffix.lower() in (".yaml", ".yml") else "json"
    return parse_graph(path.read_text(), fmt)

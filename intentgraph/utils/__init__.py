"""Utility functions for intentgraph."""

from intentgraph.utils.identifiers import (
    generate_graph_key,
    utc_timestamp,
)

__all__ = [
    "generate_graph_key",
    "utc_timestamp",
]

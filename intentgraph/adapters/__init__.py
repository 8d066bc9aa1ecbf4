"""Graph stores used as the engine's graph source and sink."""

from intentgraph.adapters.stores import (
    STORE_BACKENDS,
    FileGraphStore,
    GraphStore,
    HttpGraphStore,
    MemoryGraphStore,
    StoreResult,
    open_store,
)

__all__ = [
    "STORE_BACKENDS",
    "FileGraphStore",
    "GraphStore",
    "HttpGraphStore",
    "MemoryGraphStore",
    "StoreResult",
    "open_store",
]

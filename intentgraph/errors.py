"""Exception types raised by the engine.

Each exception carries the envelope code it is reported under, so the
operation layer can turn it into a ``ToolError`` without guessing.
"""

from typing import Any

GRAPH_NOT_FOUND = "GRAPH_NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"
ANALYSIS_ERROR = "ANALYSIS_ERROR"
OPTIMIZATION_ERROR = "OPTIMIZATION_ERROR"
EXPORT_ERROR = "EXPORT_ERROR"
STORAGE_ERROR = "STORAGE_ERROR"


class IntentGraphError(Exception):
    """Base class for engine errors."""

    code = ANALYSIS_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class GraphNotFoundError(IntentGraphError):
    """No graph inline and nothing stored under the requested key."""

    code = GRAPH_NOT_FOUND

    def __init__(self, key: str | None) -> None:
        if key is None:
            message = "No graph supplied and no key given to look one up"
        else:
            message = f"Graph not found: {key}"
        super().__init__(message, {"key": key})
        self.key = key


class GraphValidationError(IntentGraphError):
    """The payload could not be read as an intent graph."""

    code = VALIDATION_ERROR


class CycleDetectedError(IntentGraphError):
    """A walk that requires an acyclic graph came back to a node it had already visited."""

    code = ANALYSIS_ERROR

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(
            f"Cycle detected: {' -> '.join(cycle)}",
            {"cycle": cycle, "node_id": cycle[-1]},
        )
        self.cycle = cycle


class UnknownStrategyError(IntentGraphError):
    code = OPTIMIZATION_ERROR

    def __init__(self, strategy: str, known: list[str]) -> None:
        super().__init__(
            f"Unknown optimization strategy: {strategy}",
            {"strategy": strategy, "known": known},
        )


class UnsupportedFormatError(IntentGraphError):
    code = EXPORT_ERROR

    def __init__(self, fmt: str, supported: list[str]) -> None:
        super().__init__(
            f"Unsupported export format: {fmt}",
            {"format": fmt, "supported": supported},
        )


class StorageError(IntentGraphError):
    """The backing store failed to read or write a graph."""

    code = STORAGE_ERROR

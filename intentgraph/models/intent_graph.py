"""Data model for intent graphs.

An intent graph describes how specialised agents cooperate to fulfil one
request: nodes are workflow steps, edges are dependencies between them, and
the execution plan names where execution starts and ends.

Graphs reach us in two historical schema shapes (``node_id``/``from_node``
versus ``id``/``source``/``from``, snake_case versus camelCase). All of the
aliases are resolved here, once, while the payload is validated. Analysis code
only ever reads the canonical field names below.
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class NodeType(str, Enum):
    """Role of a node within the workflow."""

    entry = "entry"
    processing = "processing"
    decision = "decision"
    exit = "exit"
    aggregation = "aggregation"
    parallel = "parallel"
    error_handler = "error_handler"


class AgentType(str, Enum):
    """Kind of agent executing a node."""

    llm = "llm"
    api = "api"
    validator = "validator"
    tool = "tool"
    router = "router"
    aggregator = "aggregator"
    transformer = "transformer"
    custom = "custom"


class EdgeType(str, Enum):
    """Kind of dependency between two nodes."""

    sequential = "sequential"
    conditional = "conditional"
    parallel = "parallel"
    error = "error"
    fallback = "fallback"
    retry = "retry"
    iteration = "iteration"


class ExecutionStrategy(str, Enum):
    sequential = "sequential"
    parallel = "parallel"
    hybrid = "hybrid"
    dag = "dag"
    adaptive = "adaptive"


class BackoffStrategy(str, Enum):
    fixed = "fixed"
    exponential = "exponential"
    linear = "linear"


class ErrorStrategy(str, Enum):
    fail = "fail"
    fallback = "fallback"
    skip = "skip"
    retry = "retry"


# edge types that are expected to close a loop
LOOP_EDGE_TYPES = {EdgeType.retry, EdgeType.iteration}

# node fields that older documents keep under metadata instead of top level
_METADATA_FALLBACKS = {
    "estimated_duration_ms": ("estimated_duration_ms", "estimatedDurationMs"),
    "cost_estimate": ("cost_estimate", "costEstimate"),
}


def _aliases(*names: str) -> AliasChoices:
    """accepted input names for a field, first match wins."""
    return AliasChoices(*names)


class _GraphModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RetryPolicy(_GraphModel):
    """how often and how patiently a node is retried."""

    max_attempts: int = Field(ge=1, validation_alias=_aliases("max_attempts", "maxAttempts"))
    backoff_strategy: BackoffStrategy = Field(
        BackoffStrategy.exponential,
        validation_alias=_aliases("backoff_strategy", "backoffStrategy"),
    )
    backoff_ms: int = Field(ge=0, validation_alias=_aliases("backoff_ms", "backoffMs"))


class NodeConfiguration(_GraphModel):
    """execution settings attached to a node."""

    timeout_ms: int | None = Field(None, ge=0, validation_alias=_aliases("timeout_ms", "timeoutMs"))
    retry_policy: RetryPolicy | None = Field(
        None, validation_alias=_aliases("retry_policy", "retryPolicy")
    )


class ErrorHandling(_GraphModel):
    """what the executor does when a node fails."""

    strategy: ErrorStrategy = ErrorStrategy.fail
    fallback_node: str | None = Field(
        None, validation_alias=_aliases("fallback_node", "fallbackNode")
    )


class Node(_GraphModel):
    """a workflow step, executed by one agent."""

    node_id: str = Field(validation_alias=_aliases("node_id", "id", "nodeId"))
    node_type: NodeType = Field(
        NodeType.processing, validation_alias=_aliases("node_type", "type", "nodeType")
    )
    agent_name: str | None = Field(None, validation_alias=_aliases("agent_name", "agentName"))
    agent_type: AgentType | None = Field(None, validation_alias=_aliases("agent_type", "agentType"))
    purpose: str | None = None
    estimated_duration_ms: int | float | None = Field(
        None, ge=0, validation_alias=_aliases("estimated_duration_ms", "estimatedDurationMs")
    )
    cost_estimate: int | float | None = Field(
        None, ge=0, validation_alias=_aliases("cost_estimate", "costEstimate")
    )
    configuration: NodeConfiguration | None = None
    error_handling: ErrorHandling | None = Field(
        None, validation_alias=_aliases("error_handling", "errorHandling")
    )
    metadata: dict[str, Any] | None = None  # priority, tags, anything else the generator attached

    @model_validator(mode="before")
    @classmethod
    def lift_metadata_estimates(cls, data: Any) -> Any:
        """Use metadata.estimated_duration_ms / metadata.cost_estimate when the
        top-level field is missing."""
        if not isinstance(data, dict):
            return data
        metadata = data.get("metadata")
        if not isinstance(metadata, dict):
            return data

        data = dict(data)
        for field_name, names in _METADATA_FALLBACKS.items():
            if any(data.get(name) is not None for name in names):
                continue
            for name in names:
                if metadata.get(name) is not None:
                    data[field_name] = metadata[name]
                    break
        return data

    def duration_or(self, default: int | float) -> int | float:
        """estimated duration, or ``default`` when none was given."""
        if self.estimated_duration_ms is None:
            return default
        return self.estimated_duration_ms

    @property
    def retry_policy(self) -> RetryPolicy | None:
        if self.configuration is None:
            return None
        return self.configuration.retry_policy


class Edge(_GraphModel):
    """a directed dependency between two nodes."""

    edge_id: str | None = Field(None, validation_alias=_aliases("edge_id", "id", "edgeId"))
    from_node: str = Field(validation_alias=_aliases("from_node", "source", "from", "fromNode"))
    to_node: str = Field(validation_alias=_aliases("to_node", "target", "to", "toNode"))
    edge_type: EdgeType = Field(
        EdgeType.sequential, validation_alias=_aliases("edge_type", "type", "edgeType")
    )
    condition: str | None = None  # evaluated by the executor, opaque here
    priority: int | None = None

    @model_validator(mode="before")
    @classmethod
    def flatten_condition(cls, data: Any) -> Any:
        """Older documents wrap the condition as {expression, evaluation_context}."""
        if isinstance(data, dict) and isinstance(data.get("condition"), dict):
            data = dict(data)
            data["condition"] = data["condition"].get("expression")
        return data

    @property
    def ref(self) -> str:
        """identifier used when reporting on this edge."""
        return self.edge_id or f"{self.from_node}->{self.to_node}"


class ExecutionPlan(_GraphModel):
    """where execution starts and ends, and how it is scheduled."""

    entry_points: list[str] = Field(
        default_factory=list, validation_alias=_aliases("entry_points", "entryPoints")
    )
    exit_points: list[str] = Field(
        default_factory=list, validation_alias=_aliases("exit_points", "exitPoints")
    )
    execution_strategy: ExecutionStrategy = Field(
        ExecutionStrategy.sequential,
        validation_alias=_aliases("execution_strategy", "executionStrategy"),
    )


class IntentGraph(_GraphModel):
    """the full graph: ordered nodes, ordered edges and one execution plan."""

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    execution_plan: ExecutionPlan = Field(
        default_factory=ExecutionPlan,
        validation_alias=_aliases("execution_plan", "executionPlan"),
    )

    @model_validator(mode="before")
    @classmethod
    def unwrap_document(cls, data: Any) -> Any:
        """Accept a full graph document ({"intent_graph": {...}, "metadata": ...})."""
        if not isinstance(data, dict):
            return data
        for wrapper in ("intent_graph", "intentGraph"):
            if isinstance(data.get(wrapper), dict):
                data = data[wrapper]
                break
        if any(name in data and data[name] is None for name in ("execution_plan", "executionPlan")):
            data = {k: v for k, v in data.items() if k not in ("execution_plan", "executionPlan")}
        return data

    def node_ids(self) -> list[str]:
        return [node.node_id for node in self.nodes]

    def get_node(self, node_id: str) -> Node | None:
        """first node declared with this id, or None."""
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        return None

    def outgoing(self, node_id: str) -> list[Edge]:
        return [edge for edge in self.edges if edge.from_node == node_id]

    def incoming(self, node_id: str) -> list[Edge]:
        return [edge for edge in self.edges if edge.to_node == node_id]

    def successors(self) -> dict[str, list[str]]:
        """adjacency lists keyed by source node id, in edge declaration order."""
        adjacency: dict[str, list[str]] = {}
        for edge in self.edges:
            adjacency.setdefault(edge.from_node, []).append(edge.to_node)
        return adjacency

"""Structural validation of intent graphs.

Every check runs on every call, so one failure never hides another. Errors
make a graph invalid; warnings are reported next to a graph that is still
valid (an isolated helper node or an entry point that is also a loop target
can be legitimate).
"""

from dataclasses import dataclass, field

from intentgraph.models.intent_graph import LOOP_EDGE_TYPES, IntentGraph

UNIQUE_NODE_IDS = "unique_node_ids"
VALID_EDGE_REFERENCES = "valid_edge_references"
ENTRY_EXIT_POINTS = "entry_exit_points"
ALL_NODES_REACHABLE = "all_nodes_reachable"
ENTRY_EXIT_SHAPE = "entry_exit_shape"
NO_SELF_LOOPS = "no_self_loops"
DAG_STRUCTURE = "dag_structure"

CHECKS = [
    UNIQUE_NODE_IDS,
    VALID_EDGE_REFERENCES,
    ENTRY_EXIT_POINTS,
    ALL_NODES_REACHABLE,
    ENTRY_EXIT_SHAPE,
    NO_SELF_LOOPS,
    DAG_STRUCTURE,
]


@dataclass
class ValidationIssue:
    """One problem found by a check, pointing at the offending node or edge."""

    check: str
    message: str
    node_id: str | None = None
    edge_id: str | None = None


@dataclass
class ValidationReport:
    """Outcome of validating one graph."""

    is_valid: bool
    checks_performed: list[str]
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)


def validate_graph(graph: IntentGraph) -> ValidationReport:
    """Run all structural checks over a graph.

    Args:
        graph: the graph to check. It is not modified.

    Returns:
        ValidationReport whose ``is_valid`` is True iff no check produced an error.
    """
    node_ids = set(graph.node_ids())

    errors: list[ValidationIssue] = []
    errors += _check_unique_node_ids(graph)
    errors += _check_edge_references(graph, node_ids)
    errors += _check_entry_exit_points(graph, node_ids)

    warnings: list[ValidationIssue] = []
    warnings += _check_reachability(graph)
    warnings += _check_entry_exit_shape(graph)
    warnings += _check_self_loops(graph)
    warnings += _check_cycles(graph)

    return ValidationReport(
        is_valid=not errors,
        checks_performed=list(CHECKS),
        errors=errors,
        warnings=warnings,
    )


def _check_unique_node_ids(graph: IntentGraph) -> list[ValidationIssue]:
    issues = []
    seen: set[str] = set()
    reported: set[str] = set()
    for node_id in graph.node_ids():
        if node_id in seen and node_id not in reported:
            issues.append(ValidationIssue(
                check=UNIQUE_NODE_IDS,
                message=f"Duplicate node ID: {node_id}",
                node_id=node_id,
            ))
            reported.add(node_id)
        seen.add(node_id)
    return issues


def _check_edge_references(graph: IntentGraph, node_ids: set[str]) -> list[ValidationIssue]:
    issues = []
    for edge in graph.edges:
        for endpoint, role in ((edge.from_node, "source"), (edge.to_node, "target")):
            if endpoint in node_ids:
                continue
            issues.append(ValidationIssue(
                check=VALID_EDGE_REFERENCES,
                message=f"Edge {edge.ref} references unknown {role} node '{endpoint}'",
                node_id=endpoint,
                edge_id=edge.ref,
            ))
    return issues


def _check_entry_exit_points(graph: IntentGraph, node_ids: set[str]) -> list[ValidationIssue]:
    plan = graph.execution_plan
    issues = []
    for label, points in (("entry", plan.entry_points), ("exit", plan.exit_points)):
        if not points:
            issues.append(ValidationIssue(
                check=ENTRY_EXIT_POINTS,
                message=f"No {label} points defined in the execution plan",
            ))
            continue
        for node_id in points:
            if node_id not in node_ids:
                issues.append(ValidationIssue(
                    check=ENTRY_EXIT_POINTS,
                    message=f"{label.capitalize()} point '{node_id}' does not reference an existing node",
                    node_id=node_id,
                ))
    return issues


def reachable_from(graph: IntentGraph, starts: list[str]) -> set[str]:
    """ids reachable by a directed walk from any of ``starts`` (starts included)."""
    adjacency = graph.successors()
    visited: set[str] = set()
    stack = list(starts)
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        for nxt in adjacency.get(current, []):
            if nxt not in visited:
                stack.append(nxt)
    return visited


def _check_reachability(graph: IntentGraph) -> list[ValidationIssue]:
    reachable = reachable_from(graph, graph.execution_plan.entry_points)
    issues = []
    reported: set[str] = set()
    for node_id in graph.node_ids():
        if node_id in reachable or node_id in reported:
            continue
        issues.append(ValidationIssue(
            check=ALL_NODES_REACHABLE,
            message=f"Node '{node_id}' is not reachable from any entry point",
            node_id=node_id,
        ))
        reported.add(node_id)
    return issues


def _check_entry_exit_shape(graph: IntentGraph) -> list[ValidationIssue]:
    plan = graph.execution_plan
    issues = []
    for node_id in dict.fromkeys(plan.entry_points):
        incoming = graph.incoming(node_id)
        if incoming:
            issues.append(ValidationIssue(
                check=ENTRY_EXIT_SHAPE,
                message=f"Entry point '{node_id}' has {len(incoming)} incoming edge(s)",
                node_id=node_id,
            ))
    for node_id in dict.fromkeys(plan.exit_points):
        outgoing = graph.outgoing(node_id)
        if outgoing:
            issues.append(ValidationIssue(
                check=ENTRY_EXIT_SHAPE,
                message=f"Exit point '{node_id}' has {len(outgoing)} outgoing edge(s)",
                node_id=node_id,
            ))
    return issues


def _check_self_loops(graph: IntentGraph) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            check=NO_SELF_LOOPS,
            message=f"Edge {edge.ref} connects node '{edge.from_node}' to itself",
            node_id=edge.from_node,
            edge_id=edge.ref,
        )
        for edge in graph.edges
        if edge.from_node == edge.to_node
    ]


def find_cycles(graph: IntentGraph) -> list[list[str]]:
    """Cycles that do not go through a retry or iteration edge.

    Self-loops are left out, they have their own check. Each cycle is
    returned as a closed walk, e.g. ``["a", "b", "a"]``.
    """
    adjacency: dict[str, list[str]] = {}
    for edge in graph.edges:
        if edge.edge_type in LOOP_EDGE_TYPES or edge.from_node == edge.to_node:
            continue
        adjacency.setdefault(edge.from_node, []).append(edge.to_node)

    cycles: list[list[str]] = []
    done: set[str] = set()

    for root in [*graph.node_ids(), *adjacency]:
        if root in done:
            continue
        # explicit stack: a long chain must not hit the recursion limit
        stack = [root]
        on_stack = {root}
        pending = [iter(adjacency.get(root, []))]
        while pending:
            nxt = next(pending[-1], None)
            if nxt is None:
                finished = stack.pop()
                pending.pop()
                on_stack.discard(finished)
                done.add(finished)
            elif nxt in on_stack:
                cycles.append(stack[stack.index(nxt):] + [nxt])
            elif nxt not in done:
                stack.append(nxt)
                on_stack.add(nxt)
                pending.append(iter(adjacency.get(nxt, [])))
    return cycles


def _check_cycles(graph: IntentGraph) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            check=DAG_STRUCTURE,
            message=f"Cycle without a retry or iteration edge: {' -> '.join(cycle)}",
            node_id=cycle[0],
        )
        for cycle in find_cycles(graph)
    ]

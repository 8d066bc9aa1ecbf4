"""Tests for the graph analyses and the analysis CLI."""

import json
from pathlib import Path

import pytest

from intentgraph.adapters.stores import FileGraphStore
from intentgraph.analysis.analyze_graph import (
    ANALYSIS_TYPES,
    analyze_graph,
    format_report,
    main,
    report_to_dict,
)
from intentgraph.analysis.bottlenecks import identify_bottlenecks
from intentgraph.analysis.complexity import calculate_complexity, estimate_resources
from intentgraph.analysis.critical_path import CriticalPath, calculate_critical_path
from intentgraph.analysis.parallelism import (
    MAX_OPPORTUNITIES,
    PARALLEL_REASON,
    find_parallel_opportunities,
)
from intentgraph.analysis.validator import validate_graph
from intentgraph.errors import CycleDetectedError
from intentgraph.export import load_graph, load_graph_file

FIXTURE = Path(__file__).parent / "fixtures" / "sample_graph.json"


def make_graph(nodes, edges, entry=None, exit=None):
    """Build a graph from (id, duration) pairs and (from, to) tuples.

    A duration of None leaves the node without an estimate.
    """
    ids = [node_id for node_id, _ in nodes]
    return load_graph({
        "nodes": [
            {"node_id": node_id, "estimated_duration_ms": duration}
            for node_id, duration in nodes
        ],
        "edges": [{"from_node": a, "to_node": b} for a, b in edges],
        "execution_plan": {
            "entry_points": entry if entry is not None else ids[:1],
            "exit_points": exit if exit is not None else ids[-1:],
        },
    })


@pytest.fixture
def sample_graph():
    return load_graph_file(FIXTURE)


class TestComplexity:
    def test_sample_graph(self, sample_graph):
        metrics = calculate_complexity(sample_graph.nodes, sample_graph.edges)
        assert metrics.node_count == 4
        assert metrics.edge_count == 4
        assert metrics.depth == 3
        assert metrics.width == 2
        assert metrics.complexity_score == 2

    def test_empty_graph(self):
        metrics = calculate_complexity([], [])
        assert metrics.node_count == 0
        assert metrics.depth == 0
        assert metrics.width == 1
        assert metrics.complexity_score == 2

    def test_score_is_never_negative(self):
        graph = make_graph([(n, None) for n in "abcde"], [])
        assert calculate_complexity(graph.nodes, graph.edges).complexity_score == 0

    def test_depth_starts_at_first_node_without_entry_type(self):
        graph = make_graph([("a", None), ("b", None), ("c", None)], [("a", "b"), ("b", "c")])
        assert calculate_complexity(graph.nodes, graph.edges).depth == 3

    def test_depth_terminates_on_cycles(self):
        graph = make_graph([("a", None), ("b", None)], [("a", "b"), ("b", "a")])
        assert calculate_complexity(graph.nodes, graph.edges).depth == 2

    def test_depth_ignores_unknown_targets(self):
        graph = make_graph([("a", None)], [("a", "ghost")])
        assert calculate_complexity(graph.nodes, graph.edges).depth == 1


class TestParallelOpportunities:
    def test_chain_reports_indirectly_dependent_pair(self):
        """Only direct edges count, so A and C in A -> B -> C qualify."""
        graph = make_graph([("A", 2000), ("B", 3000), ("C", 1000)], [("A", "B"), ("B", "C")])
        opportunities = find_parallel_opportunities(graph)
        assert len(opportunities) == 1
        assert opportunities[0].nodes == ["A", "C"]
        assert opportunities[0].potential_savings_ms == 1000
        assert opportunities[0].reason == PARALLEL_REASON

    def test_capped_in_enumeration_order(self):
        graph = make_graph([(n, None) for n in "abcde"], [])
        opportunities = find_parallel_opportunities(graph)
        assert len(opportunities) == MAX_OPPORTUNITIES
        assert [o.nodes for o in opportunities] == [
            ["a", "b"], ["a", "c"], ["a", "d"], ["a", "e"], ["b", "c"],
        ]
        assert all(o.potential_savings_ms == 1000 for o in opportunities)

    def test_reverse_edge_also_links(self):
        graph = make_graph([("a", None), ("b", None)], [("b", "a")])
        assert find_parallel_opportunities(graph) == []

    def test_explicit_zero_duration_is_kept(self):
        graph = make_graph([("a", 0), ("b", 400)], [])
        assert find_parallel_opportunities(graph)[0].potential_savings_ms == 0

    def test_sample_graph(self, sample_graph):
        opportunities = find_parallel_opportunities(sample_graph)
        assert [(o.nodes, o.potential_savings_ms) for o in opportunities] == [
            (["intake", "reply"], 1200),
            (["lookup", "policy"], 800),
        ]


class TestCriticalPath:
    def test_chain(self):
        graph = make_graph([("A", 2000), ("B", 3000), ("C", 1000)], [("A", "B"), ("B", "C")])
        assert calculate_critical_path(graph) == CriticalPath(path=["A", "B", "C"], total_duration_ms=6000)

    def test_sample_graph_takes_slow_branch(self, sample_graph):
        critical = calculate_critical_path(sample_graph)
        assert critical.path == ["intake", "policy", "reply"]
        assert critical.total_duration_ms == 9700

    def test_unset_durations_default_to_one_second(self):
        graph = make_graph([("a", None), ("b", None), ("c", None)], [("a", "b"), ("b", "c")])
        critical = calculate_critical_path(graph)
        depth = calculate_complexity(graph.nodes, graph.edges).depth
        assert critical.total_duration_ms == 1000 * depth == 3000

    def test_first_path_wins_a_tie(self):
        graph = make_graph([("a", None), ("b", None), ("c", None)], [("a", "b"), ("a", "c")])
        assert calculate_critical_path(graph).path == ["a", "b"]

    def test_all_zero_durations_still_give_a_path(self):
        graph = make_graph([("a", 0), ("b", 0)], [("a", "b")])
        assert calculate_critical_path(graph) == CriticalPath(path=["a", "b"], total_duration_ms=0)

    def test_multiple_entry_points(self):
        graph = make_graph(
            [("a", 100), ("b", 100), ("x", 5000)],
            [("a", "b")],
            entry=["a", "x"],
            exit=["b", "x"],
        )
        assert calculate_critical_path(graph).path == ["x"]

    def test_no_entry_points(self):
        graph = make_graph([("a", 100)], [], entry=[])
        assert calculate_critical_path(graph) == CriticalPath()

    def test_unknown_target_is_dropped(self):
        graph = make_graph([("a", 100), ("b", 100)], [("a", "ghost"), ("a", "b")])
        assert calculate_critical_path(graph).path == ["a", "b"]

    def test_long_chain(self):
        ids = [f"n{i}" for i in range(1500)]
        graph = make_graph([(node_id, None) for node_id in ids], list(zip(ids, ids[1:])))
        critical = calculate_critical_path(graph)
        assert critical.path == ids
        assert critical.total_duration_ms == 1000 * len(ids)

    def test_cycle_raises(self):
        graph = make_graph([("a", None), ("b", None), ("c", None)], [("a", "b"), ("b", "c"), ("c", "b")])
        with pytest.raises(CycleDetectedError) as exc_info:
            calculate_critical_path(graph)
        assert exc_info.value.cycle == ["b", "c", "b"]
        assert exc_info.value.code == "ANALYSIS_ERROR"


class TestBottlenecks:
    def test_slow_node_with_high_fan_in(self):
        """One node can be flagged by more than one rule."""
        graph = make_graph(
            [("a", None), ("b", None), ("c", None), ("d", None), ("sink", 6000)],
            [("a", "sink"), ("b", "sink"), ("c", "sink"), ("d", "sink")],
        )
        bottlenecks = identify_bottlenecks(graph)
        assert [(b.node_id, b.impact, b.reason) for b in bottlenecks] == [
            ("sink", "high", "Long execution time (6000ms)"),
            ("sink", "medium", "High fan-in (4 incoming edges)"),
        ]

    def test_high_fan_out(self):
        graph = make_graph(
            [("hub", None), ("a", None), ("b", None), ("c", None), ("d", None)],
            [("hub", "a"), ("hub", "b"), ("hub", "c"), ("hub", "d")],
        )
        bottlenecks = identify_bottlenecks(graph)
        assert [(b.node_id, b.reason) for b in bottlenecks] == [
            ("hub", "High fan-out (4 outgoing edges)"),
        ]

    def test_thresholds_are_exclusive(self):
        graph = make_graph(
            [("a", 5000), ("b", None), ("c", None), ("d", None)],
            [("b", "a"), ("c", "a"), ("d", "a")],
        )
        assert identify_bottlenecks(graph) == []

    def test_unset_duration_is_not_flagged(self):
        graph = make_graph([("a", None)], [])
        assert identify_bottlenecks(graph) == []

    def test_output_is_stable(self, sample_graph):
        first = identify_bottlenecks(sample_graph)
        assert first == identify_bottlenecks(sample_graph)
        assert [(b.node_id, b.impact) for b in first] == [("policy", "high")]


class TestResources:
    def test_sample_graph(self, sample_graph):
        resources = estimate_resources(sample_graph)
        assert resources.estimated_duration_ms == 10500
        assert resources.estimated_cost == pytest.approx(0.006)
        assert resources.estimated_api_calls == 3

    def test_empty_graph(self):
        resources = estimate_resources(load_graph({}))
        assert resources.estimated_duration_ms == 0
        assert resources.estimated_cost == 0
        assert resources.estimated_api_calls == 0


class TestAnalyzeGraph:
    def test_all_sections_by_default(self, sample_graph):
        report = report_to_dict(analyze_graph(sample_graph))
        assert list(report) == ANALYSIS_TYPES
        assert report["critical_path"]["total_duration_ms"] == 9700

    def test_selected_sections_only(self, sample_graph):
        report = report_to_dict(analyze_graph(sample_graph, ["bottlenecks"]))
        assert list(report) == ["bottlenecks"]

    def test_unknown_type_raises(self, sample_graph):
        with pytest.raises(ValueError, match="graph_coloring"):
            analyze_graph(sample_graph, ["graph_coloring"])

    def test_does_not_modify_graph(self, sample_graph):
        before = sample_graph.model_copy(deep=True)
        analyze_graph(sample_graph)
        assert sample_graph == before

    def test_format_report(self, sample_graph):
        text = format_report(analyze_graph(sample_graph), validate_graph(sample_graph))
        assert "INTENT GRAPH ANALYSIS" in text
        assert "Valid: yes" in text
        assert "intake → policy → reply" in text
        assert "[high] policy: Long execution time (6500ms)" in text


class TestCli:
    def test_text_report(self, capsys):
        main([str(FIXTURE)])
        out = capsys.readouterr().out
        assert "CRITICAL PATH" in out
        assert "Total: 9700ms" in out

    def test_json_report_with_validation(self, capsys):
        main([str(FIXTURE), "--json", "--validate", "--only", "complexity"])
        report = json.loads(capsys.readouterr().out)
        assert set(report) == {"complexity", "validation"}
        assert report["validation"]["is_valid"] is True

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1
        assert "graph file not found" in capsys.readouterr().err

    def test_cyclic_graph_exits_with_error(self, tmp_path, capsys):
        path = tmp_path / "cycle.yaml"
        path.write_text(
            "nodes: [{id: a}, {id: b}]\n"
            "edges: [{from: a, to: b}, {from: b, to: a}]\n"
            "execution_plan: {entry_points: [a], exit_points: [b]}\n"
        )
        with pytest.raises(SystemExit):
            main([str(path), "--only", "critical_path"])
        assert "Cycle detected: a -> b -> a" in capsys.readouterr().err


class TestCliStoredGraphs:
    """Graphs can be analyzed straight from a store configured in the environment."""

    @pytest.fixture
    def store_dir(self, tmp_path, monkeypatch, sample_graph):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("GRAPH_STORE_DIR", str(tmp_path / "graphs"))
        FileGraphStore(tmp_path / "graphs").put("refund", sample_graph)
        return tmp_path / "graphs"

    def test_analyze_by_key(self, store_dir, capsys):
        main(["--key", "refund", "--store", "file", "--json", "--only", "critical_path"])
        report = json.loads(capsys.readouterr().out)
        assert report["critical_path"]["path"] == ["intake", "policy", "reply"]

    def test_missing_key(self, store_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--key", "nope", "--store", "file"])
        assert exc_info.value.code == 1
        assert "Graph not found: nope" in capsys.readouterr().err

    def test_file_and_key_are_exclusive(self, store_dir):
        with pytest.raises(SystemExit) as exc_info:
            main([str(FIXTURE), "--key", "refund"])
        assert exc_info.value.code == 2

    def test_file_or_key_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

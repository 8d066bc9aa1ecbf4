"""Tests for the enveloped operations, graph stores and settings."""

import json
from pathlib import Path

import httpx
import pytest

from intentgraph.adapters.stores import (
    FileGraphStore,
    GraphStore,
    HttpGraphStore,
    MemoryGraphStore,
    StoreResult,
    open_store,
)
from intentgraph.config import Settings
from intentgraph.errors import GraphNotFoundError, StorageError
from intentgraph.export import load_graph_file, parse_graph
from intentgraph.models.envelope import ToolError, ToolSuccess
from intentgraph.sdk.operations import (
    analyze_graph_tool,
    export_graph_tool,
    optimize_graph_tool,
    resolve_graph,
    store_graph_tool,
    suggest_improvements_tool,
    validate_graph_tool,
)
from intentgraph.utils.identifiers import generate_graph_key

FIXTURE = Path(__file__).parent / "fixtures" / "sample_graph.json"


@pytest.fixture
def sample_graph():
    return load_graph_file(FIXTURE)


@pytest.fixture
def raw_graph():
    return json.loads(FIXTURE.read_text())


CYCLIC = {
    "nodes": [{"id": "a"}, {"id": "b"}],
    "edges": [{"from": "a", "to": "b"}, {"from": "b", "to": "a"}],
    "execution_plan": {"entry_points": ["a"], "exit_points": ["b"]},
}


class ExplodingStore(GraphStore):
    """Store whose backend is always down."""

    def get(self, key):
        raise StorageError("backend unavailable", {"key": key})

    def put(self, key, graph):
        raise RuntimeError("disk on fire")


class TestResolveGraph:
    def test_inline_payload_wins_over_key(self, raw_graph, sample_graph):
        store = MemoryGraphStore()
        assert resolve_graph(raw_graph, key="other", store=store) == sample_graph

    def test_lookup_by_key(self, sample_graph):
        store = MemoryGraphStore()
        store.put("refund", sample_graph)
        assert resolve_graph(key="refund", store=store) == sample_graph

    def test_missing_key(self):
        with pytest.raises(GraphNotFoundError) as exc_info:
            resolve_graph(key="nope", store=MemoryGraphStore())
        assert exc_info.value.message == "Graph not found: nope"

    def test_nothing_supplied(self):
        with pytest.raises(GraphNotFoundError):
            resolve_graph()


class TestEnvelopes:
    """Every operation answers with a success or error envelope, never an exception."""

    def test_validate_success(self, raw_graph):
        response = validate_graph_tool(raw_graph)
        assert isinstance(response, ToolSuccess)
        assert response.success is True
        assert response.result["is_valid"] is True

    def test_invalid_graph_is_still_a_success(self):
        response = validate_graph_tool({"nodes": [{"id": "a"}, {"id": "a"}]})
        assert response.success is True
        assert response.result["is_valid"] is False

    def test_unreadable_payload(self):
        response = validate_graph_tool({"nodes": [{"purpose": "no id"}]})
        assert isinstance(response, ToolError)
        assert response.error.code == "VALIDATION_ERROR"
        assert response.error.details["errors"]

    def test_graph_not_found(self):
        response = analyze_graph_tool(key="missing", store=MemoryGraphStore())
        assert response.success is False
        assert response.error.code == "GRAPH_NOT_FOUND"
        assert response.error.details == {"key": "missing"}

    def test_analyze_selected_types(self, sample_graph):
        response = analyze_graph_tool(sample_graph, analysis_types=["critical_path"])
        assert response.result == {
            "critical_path": {"path": ["intake", "policy", "reply"], "total_duration_ms": 9700}
        }

    def test_analyze_cycle_is_analysis_error(self):
        response = analyze_graph_tool(CYCLIC)
        assert response.error.code == "ANALYSIS_ERROR"
        assert response.error.details["cycle"] == ["a", "b", "a"]

    def test_analyze_unknown_type_is_analysis_error(self, sample_graph):
        response = analyze_graph_tool(sample_graph, analysis_types=["astrology"])
        assert response.error.code == "ANALYSIS_ERROR"
        assert "astrology" in response.error.message

    def test_optimize(self, sample_graph):
        response = optimize_graph_tool(sample_graph, strategies=["improve_reliability"])
        assert response.success is True
        assert response.result["improvements"]["latency_reduction_ms"] == 500
        optimized = response.result["optimized_graph"]
        assert optimized["nodes"][0]["configuration"]["retry_policy"]["max_attempts"] == 3

    def test_optimize_unknown_strategy(self, sample_graph):
        response = optimize_graph_tool(sample_graph, strategies=["teleport"])
        assert response.error.code == "OPTIMIZATION_ERROR"

    def test_suggest(self, sample_graph):
        response = suggest_improvements_tool(sample_graph)
        assert response.result["count"] == len(response.result["suggestions"]) == 4

    def test_export_round_trips(self, sample_graph):
        response = export_graph_tool(sample_graph, fmt="yaml")
        assert response.result["format"] == "yaml"
        assert parse_graph(response.result["content"], "yaml") == sample_graph

    def test_export_unsupported_format(self, sample_graph):
        response = export_graph_tool(sample_graph, fmt="dot")
        assert response.error.code == "EXPORT_ERROR"
        assert response.error.details["supported"] == ["json", "yaml"]

    def test_store_error_on_lookup(self):
        response = validate_graph_tool(key="k", store=ExplodingStore())
        assert response.error.code == "STORAGE_ERROR"


class TestStoreGraphTool:
    def test_generated_key_is_deterministic(self, raw_graph):
        first = store_graph_tool(raw_graph, MemoryGraphStore())
        second = store_graph_tool(raw_graph, MemoryGraphStore())
        assert first.result["key"] == second.result["key"]
        assert first.result["key"].startswith("intent_graph_")
        assert first.result["storage"] == {"success": True, "key": first.result["key"], "error": None}

    def test_explicit_key(self, sample_graph):
        store = MemoryGraphStore()
        response = store_graph_tool(sample_graph, store, key="refund")
        assert response.result["key"] == "refund"
        assert store.get("refund") == sample_graph

    def test_store_failure_still_returns_graph(self, sample_graph):
        response = store_graph_tool(sample_graph, ExplodingStore(), key="refund")
        assert response.success is True
        assert response.result["graph"]["nodes"][0]["node_id"] == "intake"
        assert response.result["storage"]["success"] is False
        assert "disk on fire" in response.result["storage"]["error"]

    def test_invalid_payload(self):
        response = store_graph_tool({"edges": [{"from": "a"}]}, MemoryGraphStore())
        assert response.error.code == "VALIDATION_ERROR"


class TestGraphKeys:
    def test_same_content_same_key(self):
        assert generate_graph_key({"a": 1, "b": 2}) == generate_graph_key({"b": 2, "a": 1})

    def test_different_content_different_key(self):
        assert generate_graph_key({"a": 1}) != generate_graph_key({"a": 2})


class TestMemoryStore:
    def test_returns_copies(self, sample_graph):
        store = MemoryGraphStore()
        store.put("k", sample_graph)
        fetched = store.get("k")
        fetched.nodes.clear()
        assert store.get("k") == sample_graph

    def test_delete_and_list(self, sample_graph):
        store = MemoryGraphStore()
        store.put("k", sample_graph)
        assert store.list_keys() == ["k"]
        assert store.delete("k") is True
        assert store.delete("k") is False
        assert store.get("k") is None


class TestFileStore:
    def test_put_get_delete(self, tmp_path, sample_graph):
        store = FileGraphStore(tmp_path / "graphs")
        assert store.put("refund", sample_graph) == StoreResult(success=True, key="refund")
        assert (tmp_path / "graphs" / "refund.json").exists()
        assert store.get("refund") == sample_graph
        assert store.list_keys() == ["refund"]
        assert store.delete("refund") is True
        assert store.get("refund") is None

    def test_unsafe_key(self, tmp_path, sample_graph):
        store = FileGraphStore(tmp_path)
        result = store.put("../escape", sample_graph)
        assert result.success is False
        with pytest.raises(StorageError):
            store.get("../escape")

    def test_corrupt_file(self, tmp_path):
        store = FileGraphStore(tmp_path)
        (tmp_path / "bad.json").write_text('{"nodes": [{"purpose": "no id"}]}')
        with pytest.raises(StorageError):
            store.get("bad")


class TestHttpStore:
    def make_store(self, handler):
        return HttpGraphStore("http://graphs.test", transport=httpx.MockTransport(handler))

    def test_get(self, sample_graph):
        def handler(request):
            assert request.url.path == "/api/graphs/refund"
            return httpx.Response(200, json={"key": "refund", "graph": sample_graph.model_dump(mode="json")})

        assert self.make_store(handler).get("refund") == sample_graph

    def test_get_missing(self):
        store = self.make_store(lambda request: httpx.Response(404, json={"detail": "Graph not found"}))
        assert store.get("refund") is None

    def test_get_server_error(self):
        store = self.make_store(lambda request: httpx.Response(500))
        with pytest.raises(StorageError):
            store.get("refund")

    def test_put(self, sample_graph):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        result = self.make_store(handler).put("refund", sample_graph)
        assert result.success is True
        assert seen["method"] == "PUT"
        assert seen["body"]["execution_plan"]["entry_points"] == ["intake"]

    def test_put_failure_is_reported(self, sample_graph):
        result = self.make_store(lambda request: httpx.Response(503)).put("refund", sample_graph)
        assert result.success is False
        assert result.error

    def test_list_and_delete(self):
        def handler(request):
            if request.method == "DELETE":
                return httpx.Response(404 if request.url.path.endswith("/gone") else 200, json={})
            return httpx.Response(200, json=[{"key": "a"}, {"key": "b"}])

        store = self.make_store(handler)
        assert store.list_keys() == ["a", "b"]
        assert store.delete("a") is True
        assert store.delete("gone") is False


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.cors_origins == ["*"]
        assert not settings.llm_configured

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ("LLM_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("GRAPH_DB_PATH", str(tmp_path / "g.db"))
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test,http://b.test")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("WRITER_API_KEY", "secret")

        settings = Settings.from_env()
        assert settings.graph_db_path == tmp_path / "g.db"
        assert settings.cors_origins == ["http://a.test", "http://b.test"]
        assert settings.log_level == "DEBUG"
        assert settings.llm_api_key == "secret"
        assert settings.llm_configured


class TestOpenStore:
    def test_file_store_uses_store_dir(self, tmp_path):
        store = open_store(Settings(graph_store_dir=tmp_path / "graphs"), "file")
        assert isinstance(store, FileGraphStore)
        assert store.directory == tmp_path / "graphs"

    def test_http_store_uses_server_url(self):
        store = open_store(Settings(server_url="http://graphs.test/"), "http")
        assert isinstance(store, HttpGraphStore)
        assert store.base_url == "http://graphs.test"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            open_store(Settings(), "carrier-pigeon")

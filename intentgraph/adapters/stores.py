"""Graph stores: where graphs are looked up by key and saved.

``put`` never raises on a backend failure. The failure is reported in the
returned ``StoreResult`` so a caller can still hand the graph back to its own
caller.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import httpx
from pydantic import ValidationError

from intentgraph.config import Settings
from intentgraph.errors import StorageError
from intentgraph.models.intent_graph import IntentGraph

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass
class StoreResult:
    success: bool
    key: str
    error: str | None = None


class GraphStore:
    """Protocol for reading and writing graphs by key."""

    def get(self, key: str) -> IntentGraph | None:
        """Return the graph stored under ``key``, or None if there is none."""
        raise NotImplementedError

    def put(self, key: str, graph: IntentGraph) -> StoreResult:
        """Store ``graph`` under ``key``, replacing any previous graph."""
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        """Remove a graph; False if nothing was stored under ``key``."""
        raise NotImplementedError

    def list_keys(self) -> list[str]:
        raise NotImplementedError


class MemoryGraphStore(GraphStore):
    """Keeps graphs in a dict. Stored and returned graphs are copies."""

    def __init__(self) -> None:
        self.graphs: dict[str, IntentGraph] = {}

    def get(self, key: str) -> IntentGraph | None:
        graph = self.graphs.get(key)
        return graph.model_copy(deep=True) if graph is not None else None

    def put(self, key: str, graph: IntentGraph) -> StoreResult:
        self.graphs[key] = graph.model_copy(deep=True)
        return StoreResult(success=True, key=key)

    def delete(self, key: str) -> bool:
        return self.graphs.pop(key, None) is not None

    def list_keys(self) -> list[str]:
        return list(self.graphs)

    def clear(self) -> None:
        """Remove all graphs."""
        self.graphs.clear()


class FileGraphStore(GraphStore):
    """Writes each graph to ``<directory>/<key>.json``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid graph key: {key!r}", {"key": key})
        return self.directory / f"{key}.json"

    def get(self, key: str) -> IntentGraph | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return IntentGraph.model_validate_json(path.read_text())
        except ValidationError as exc:
            raise StorageError(f"Stored graph {key} is corrupt", {"key": key}) from exc

    def put(self, key: str, graph: IntentGraph) -> StoreResult:
        try:
            self._path(key).write_text(graph.model_dump_json())
        except (OSError, StorageError) as exc:
            logger.warning("failed to store graph %s: %s", key, exc)
            return StoreResult(success=False, key=key, error=str(exc))
        logger.debug("stored graph %s in %s", key, self.directory)
        return StoreResult(success=True, key=key)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def list_keys(self) -> list[str]:
        return sorted(p.stem for p in self.directory.glob("*.json"))


class HttpGraphStore(GraphStore):
    """Reads and writes graphs through the graph service's REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    def get(self, key: str) -> IntentGraph | None:
        try:
            with self._client() as client:
                response = client.get(f"/api/graphs/{key}")
                if response.status_code == 404:
                    return None
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to fetch graph {key}: {exc}", {"key": key}) from exc
        return IntentGraph.model_validate(response.json()["graph"])

    def put(self, key: str, graph: IntentGraph) -> StoreResult:
        try:
            with self._client() as client:
                response = client.put(f"/api/graphs/{key}", json=graph.model_dump(mode="json"))
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("failed to store graph %s at %s: %s", key, self.base_url, exc)
            return StoreResult(success=False, key=key, error=str(exc))
        return StoreResult(success=True, key=key)

    def delete(self, key: str) -> bool:
        try:
            with self._client() as client:
                response = client.delete(f"/api/graphs/{key}")
                if response.status_code == 404:
                    return False
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to delete graph {key}: {exc}", {"key": key}) from exc
        return True

    def list_keys(self) -> list[str]:
        try:
            with self._client() as client:
                response = client.get("/api/graphs")
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to list graphs: {exc}") from exc
        return [record["key"] for record in response.json()]


STORE_BACKENDS = ["file", "http"]


def open_store(settings: Settings, backend: str = "file") -> GraphStore:
    """Build the named store from settings.

    ``file`` keeps graphs under ``settings.graph_store_dir``; ``http`` talks to
    the graph service at ``settings.server_url``.
    """
    if backend == "file":
        return FileGraphStore(settings.graph_store_dir)
    if backend == "http":
        return HttpGraphStore(settings.server_url)
    raise ValueError(f"Unknown graph store backend: {backend}")

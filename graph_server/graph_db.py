"""SQLite storage for intent graphs."""

import logging
import sqlite3
from pathlib import Path

from intentgraph.adapters.stores import GraphStore, StoreResult
from intentgraph.models.intent_graph import IntentGraph
from intentgraph.models.stored_graph import StoredGraph, StoredGraphSummary
from intentgraph.utils.identifiers import utc_timestamp

logger = logging.getLogger(__name__)


class SqliteGraphStore(GraphStore):
    """Graph store backed by one sqlite table."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                create table if not exists graphs (
                    key text primary key,
                    name text,
                    graph_json text not null,
                    node_count integer not null,
                    edge_count integer not null,
                    created_at text not null,
                    updated_at text not null
                )
                """
            )
            conn.commit()

    def put(self, key: str, graph: IntentGraph, name: str | None = None) -> StoreResult:
        """insert or update a graph; the creation time of an existing key is kept."""
        now = utc_timestamp()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    insert into graphs (key, name, graph_json, node_count, edge_count, created_at, updated_at)
                    values (?, ?, ?, ?, ?, ?, ?)
                    on conflict(key) do update set
                        name = coalesce(excluded.name, graphs.name),
                        graph_json = excluded.graph_json,
                        node_count = excluded.node_count,
                        edge_count = excluded.edge_count,
                        updated_at = excluded.updated_at
                    """,
                    (
                        key,
                        name,
                        graph.model_dump_json(),
                        len(graph.nodes),
                        len(graph.edges),
                        now,
                        now,
                    ),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.warning("failed to store graph %s in %s: %s", key, self.db_path, exc)
            return StoreResult(success=False, key=key, error=str(exc))
        return StoreResult(success=True, key=key)

    def get_record(self, key: str) -> StoredGraph | None:
        with self._connect() as conn:
            row = conn.execute(
                "select key, name, graph_json, created_at, updated_at from graphs where key = ?",
                (key,),
            ).fetchone()
        if not row:
            return None
        return StoredGraph(
            key=row["key"],
            name=row["name"],
            graph=IntentGraph.model_validate_json(row["graph_json"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get(self, key: str) -> IntentGraph | None:
        record = self.get_record(key)
        return record.graph if record else None

    def list_records(self) -> list[StoredGraphSummary]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                select key, name, node_count, edge_count, created_at, updated_at
                from graphs order by updated_at desc
                """
            ).fetchall()
        return [StoredGraphSummary(**dict(row)) for row in rows]

    def list_keys(self) -> list[str]:
        return [record.key for record in self.list_records()]

    def delete(self, key: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("delete from graphs where key = ?", (key,))
            conn.commit()
        return cursor.rowcount > 0

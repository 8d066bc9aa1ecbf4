"""Key generation and timestamp utilities."""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any

GRAPH_KEY_PREFIX = "intent_graph"


def generate_graph_key(content: Any) -> str:
    """Derive a storage key from request content.

    The same content always yields the same key: the content is dumped as
    canonical JSON (sorted keys) and hashed.
    """
    canonical = json.dumps(content, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]
    return f"{GRAPH_KEY_PREFIX}_{digest}"


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()

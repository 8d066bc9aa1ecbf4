"""Runtime settings, read from the environment (and a .env file) once at startup.

The engine itself never looks at the environment; the service and the CLI
build a ``Settings`` object and pass what they need inward.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_DATA_DIR = Path.home() / ".intentgraph"


def _first_env(*names: str, default: str | None = None) -> str | None:
    """value of the first variable in ``names`` that is set and non-empty."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


class Settings(BaseModel):
    """Configuration injected at the service boundary."""

    graph_db_path: Path = DEFAULT_DATA_DIR / "graphs.db"
    graph_store_dir: Path = DEFAULT_DATA_DIR / "graphs"
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    server_url: str = "http://localhost:8000"

    # key for the graph generation service; the health route reports whether it is set
    llm_api_key: str | None = None

    @property
    def llm_configured(self) -> bool:
        return bool(self.llm_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, loading .env first."""
        load_dotenv()  # load environment variables from .env file
        return cls(
            graph_db_path=Path(_first_env("GRAPH_DB_PATH", default=str(DEFAULT_DATA_DIR / "graphs.db"))),
            graph_store_dir=Path(_first_env("GRAPH_STORE_DIR", default=str(DEFAULT_DATA_DIR / "graphs"))),
            # comma-separated values for multiple origins, or "*" for all (development only)
            cors_origins=_first_env("CORS_ORIGINS", default="*").split(","),
            log_level=_first_env("LOG_LEVEL", default="INFO").upper(),
            server_url=_first_env("INTENTGRAPH_SERVER_URL", default="http://localhost:8000"),
            llm_api_key=_first_env("LLM_API_KEY", "WRITER_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"),
        )

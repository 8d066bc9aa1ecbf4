"""FastAPI application serving intent graph storage and analysis."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from graph_server.graph_db import SqliteGraphStore
from graph_server.graph_routes import router as graph_router
from intentgraph.config import Settings
from intentgraph.logging_setup import configure_logging

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app; settings default to the environment."""
    settings = settings or Settings.from_env()
    store = SqliteGraphStore(settings.graph_db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize logging and the database table on startup."""
        configure_logging(settings.log_level)
        store.init_db()
        logger.info("graph store ready at %s", settings.graph_db_path)
        yield

    app = FastAPI(
        title="Intent Graph API",
        description="API server for storing, validating, analyzing and optimizing intent graphs",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.graph_store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(graph_router, prefix="/api")

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {
            "status": "ok",
            "version": VERSION,
            "graph_db": str(settings.graph_db_path),
            "generation_configured": settings.llm_configured,
            "endpoints": {
                "graphs": "/api/graphs",
                "validate": "/api/graphs/validate",
                "analyze": "/api/graphs/analyze",
                "optimize": "/api/graphs/optimize",
                "suggest": "/api/graphs/suggest",
                "export": "/api/graphs/export",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

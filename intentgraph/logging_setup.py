"""Logging configuration shared by the service and the CLI."""

import logging
from logging.config import dictConfig


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr with a uniform format."""
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "std": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "std",
                "level": level,
            },
        },
        "loggers": {
            "intentgraph": {"level": level, "handlers": ["stderr"], "propagate": False},
            "graph_server": {"level": level, "handlers": ["stderr"], "propagate": False},
        },
    })
    logging.getLogger(__name__).debug("logging configured at %s", level)

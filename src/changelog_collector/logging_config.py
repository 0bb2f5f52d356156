"""Structured logging configuration.

Sets up structlog so that every pipeline step emits an event with
keyword context instead of free-form text:

  {"event": "commit_resolved", "fragment": "fix-cache.yml", "sha": "3f2a..."}

Standard output carries the rendered changelog, so all log output is
written to standard error.

Usage:
    from changelog_collector.logging_config import setup_logging, get_logger

    setup_logging(environment="production")
    logger = get_logger(__name__)
    logger.info("fragments_discovered", count=12)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

import structlog


def setup_logging(
    environment: str | None = None,
    log_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for the application.

    In development: Pretty-printed, colorized output for readability.
    In production: JSON output for log ingestion.

    Args:
        environment: "development" or "production". Reads from
                     ENVIRONMENT env var if not provided.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Reads from LOG_LEVEL env var if not provided.
        stream: Where log lines go. Defaults to stderr.
    """
    env = environment or os.environ.get("ENVIRONMENT", "development")
    level = log_level or os.environ.get("LOG_LEVEL", "INFO")
    out = stream or sys.stderr

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    # httpx logs through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=out,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        A structlog bound logger
    """
    return structlog.get_logger(name)


def bind_run_context(repo: str, system: str) -> None:
    """Attach the repository and system name to every event of this run."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(repo=repo, system=system)

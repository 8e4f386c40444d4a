"""Logging configuration for hotel_rater.

structlog on top of the standard library: plain console output by default,
JSON lines when ``json_output`` is set.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

_configured: bool = False


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging once.

    Args:
        level: Log level name. Defaults to env HOTEL_RATER_LOG_LEVEL or INFO.
        json_output: Render JSON lines. Defaults to env HOTEL_RATER_LOG_JSON.

    Returns:
        Root bound logger.
    """
    global _configured

    if _configured:
        return structlog.get_logger()

    log_level = (level or os.environ.get("HOTEL_RATER_LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)
    if json_output is None:
        json_output = os.environ.get("HOTEL_RATER_LOG_JSON", "").lower() in {"1", "true", "yes"}

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    return structlog.get_logger()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, lazily configuring logging on first use."""
    if not _configured:
        configure_logging()
    logger = structlog.get_logger()
    if name:
        return logger.bind(logger_name=name)
    return logger

import logging
import sys
from typing import Any

import structlog

from app.config.settings import get_settings


def configure_logging(debug: bool | None = None, json_logs: bool | None = None) -> None:
    """Configure structured logging with structlog.

    Both arguments default to the ``debug`` and ``log_json`` settings; pass
    ``json_logs=False`` for readable console output while working on programs
    interactively.
    """
    settings = get_settings()
    debug = settings.debug if debug is None else debug
    json_logs = settings.log_json if json_logs is None else json_logs
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_log_context(**kwargs: Any) -> None:
    """Bind values (user, gym) to every later log entry of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()

"""Structured logging setup for the EML compiler."""

from __future__ import annotations

import logging
from typing import Any

import structlog

from .config import Settings, get_settings

QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    level: str | None = None,
    *,
    settings: Settings | None = None,
    json_output: bool | None = None,
) -> None:
    """Route structlog events through the standard library at the configured level.

    Context bound with :func:`bind_compile_context` (project and survey ids) is
    merged into every event emitted while a compilation is running.
    """
    resolved_settings = settings or get_settings()
    numeric_level = _numeric_level(level or resolved_settings.log_level)
    use_json = resolved_settings.log_json if json_output is None else json_output

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(format="%(message)s", level=numeric_level)
    root_logger.setLevel(numeric_level)

    renderer: Any = structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _quiet_http_loggers(numeric_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger."""
    return structlog.get_logger(name)


def bind_compile_context(**context: Any):
    """Context manager that tags log events emitted inside it with ``context``."""
    return structlog.contextvars.bound_contextvars(**context)


def _numeric_level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _quiet_http_loggers(level: int) -> None:
    # Request lines from the taxonomy client only show up when debugging.
    http_level = level if level <= logging.DEBUG else logging.WARNING
    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(http_level)

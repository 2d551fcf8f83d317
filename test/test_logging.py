from __future__ import annotations

import logging

import structlog

from eml_compiler.core.logging import bind_compile_context, configure_logging

from eml_fakes import make_settings


def test_configure_logging_sets_levels() -> None:
    root_logger = logging.getLogger()
    previous = root_logger.level
    try:
        configure_logging("ERROR", settings=make_settings(), json_output=False)

        assert root_logger.level == logging.ERROR
        assert logging.getLogger("httpx").level == logging.WARNING

        configure_logging(settings=make_settings(log_level="DEBUG"))

        assert root_logger.level == logging.DEBUG
        assert logging.getLogger("httpcore").level == logging.DEBUG
    finally:
        root_logger.setLevel(previous)
        structlog.reset_defaults()


def test_compile_context_is_scoped() -> None:
    with bind_compile_context(project_id=7):
        assert structlog.contextvars.get_contextvars()["project_id"] == 7

    assert "project_id" not in structlog.contextvars.get_contextvars()

"""Logging configuration for HAL Mapper.

Uses structlog for structured logging with support for both
human-readable console output and JSON format for pipelines.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from hal_mapper.domain.model.mapping import Configuration


def setup_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure structured logging.

    Logs go to stderr so exporters can write artifacts to stdout.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to HAL_LOG_LEVEL env var
            or WARNING.
        log_format: Output format ('console' or 'json'). Defaults to HAL_LOG_FORMAT env var
            or 'console'.
    """
    level = level or os.environ.get("HAL_LOG_LEVEL", "WARNING")
    log_format = log_format or os.environ.get("HAL_LOG_FORMAT", "console")

    log_level = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LogContext:
    """Context manager binding key/values to every log line in its scope.

    Example:
        with LogContext(project="prj_1", export_format="xml"):
            exporter(...)
    """

    def __init__(self, **kwargs: Any) -> None:
        self._context = kwargs

    def __enter__(self) -> LogContext:
        structlog.contextvars.bind_contextvars(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self._context.keys())


def bind_project(config: Configuration) -> None:
    """Tag every following log line with the loaded configuration.

    Adds ``project``, ``config_id`` and ``config_version``; a later call
    replaces the values.
    """
    structlog.contextvars.bind_contextvars(
        project=config.project_id or config.id,
        config_id=config.id,
        config_version=config.version,
    )

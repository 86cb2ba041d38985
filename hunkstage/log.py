"""Logging utilities for hunkstage.

Loggers are structlog proxies obtained with get_logger(). Until
configure_logging() is called (the CLI does this on startup) only warnings
and errors are written to stderr, unless the application has configured
structlog itself.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import Literal, Optional

import structlog

LogFormatType = Literal["json", "text"]


def _get_log_level() -> int:
    """Get the log level from environment variables.

    Checks HUNKSTAGE_DEBUG first (sets DEBUG if present), then
    HUNKSTAGE_LOG_LEVEL. Defaults to INFO if neither is set.

    Returns:
        The logging level as an integer.
    """
    if getenv("HUNKSTAGE_DEBUG", None):
        return logging.DEBUG

    return _log_level_from_string(getenv("HUNKSTAGE_LOG_LEVEL", "info"))


def _log_level_from_string(level: str) -> int:
    """Convert a log level string to a logging level integer."""
    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    log_format: LogFormatType = "text",
) -> None:
    """Configure structlog for the whole process.

    Args:
        level: Log level name (debug, info, warning, error). Falls back to
            the environment when not given.
        log_file: Append logs to this file instead of stderr.
        log_format: Output format, either "json" or "text".
    """
    effective_level = _log_level_from_string(level) if level else _get_log_level()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_file.open("a"))
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(effective_level),
        logger_factory=logger_factory,
        context_class=dict,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a logger bound to the given module name."""
    return structlog.get_logger(logger_name=name)


def _configure_defaults() -> None:
    if not structlog.is_configured():
        structlog.configure(
            wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        )


_configure_defaults()

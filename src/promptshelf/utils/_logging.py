"""Logging utilities for promptshelf.

This module provides standalone structlog logger factories that write
JSON-formatted or text-formatted logs to a log file. Each logger is
self-contained and does not modify global structlog configuration.
"""

import logging
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from promptshelf.config import Config

LogFormatType = Literal["json", "text"]

DEBUG_ENV_VAR = "PROMPTSHELF_DEBUG"
"""When set to any non-empty value, forces DEBUG level."""


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, PROMPTSHELF_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv(DEBUG_ENV_VAR, None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def create_logger(
    log_file: Path | str,
    *,
    level: str = "info",
    log_format: LogFormatType = "json",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger writing to the specified file.

    Args:
        log_file: Path to the log file (opened in append mode).
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".

    Returns:
        A configured FilteringBoundLogger instance.
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    effective_level = _log_level_from_string(level, respect_env=True)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    # wrap_logger leaves the global structlog configuration untouched
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.WriteLoggerFactory(file=log_path.open("a", encoding="utf-8"))(),
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(effective_level),
            context_class=dict,
        ),
    )


def create_store_logger(
    config: "Config",  # noqa: UP037
    *,
    component: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger for storage operations from configuration.

    Writes to ``config.logging.file`` or, when that is empty, to
    ``<storage root>/logs/promptshelf.log``.

    The log level is determined by (in order of precedence):
    1. PROMPTSHELF_DEBUG environment variable (if set, enables DEBUG level)
    2. ``config.logging.level``

    Args:
        config: Loaded configuration.
        component: Optional component name bound to every entry.

    Returns:
        A FilteringBoundLogger instance.
    """
    logger = create_logger(
        config.log_file_path,
        level=config.logging.level.value,
        log_format=cast("LogFormatType", config.logging.format.value),
    )
    if component:
        return logger.bind(component=component)
    return logger

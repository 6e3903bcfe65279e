"""Structured logging setup using structlog."""

import logging
import os
import sys
from typing import Any

import structlog


def _get_log_level_from_env() -> int:
    """
    Get log level from environment variable.

    Checks LABEL_AUTHZ_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR) or
    LABEL_AUTHZ_DEBUG (0/1).

    Returns:
        Logging level constant
    """
    level_str = os.environ.get("LABEL_AUTHZ_LOG_LEVEL", "").upper()
    if level_str:
        return getattr(logging, level_str, logging.INFO)

    debug_env = os.environ.get("LABEL_AUTHZ_DEBUG", "0")
    if debug_env in ("1", "true", "yes", "on"):
        return logging.DEBUG

    return logging.INFO


def setup_logging(
    debug: bool = False,
    json_output: bool = False,
    level: int | str | None = None,
) -> structlog.stdlib.BoundLogger:
    """
    Configure structured logging for the application.

    Log level precedence: level param > debug param > environment variables.

    Environment variables:
        LABEL_AUTHZ_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR
        LABEL_AUTHZ_DEBUG: Set to "1" for debug mode

    Args:
        debug: Enable debug-level logging (overridden by level param)
        json_output: Output logs as JSON instead of colored console output
        level: Explicit log level, as a constant or a name like "WARNING"

    Returns:
        Configured bound logger

    Examples:
        >>> log = setup_logging(debug=True)
        >>> log.info("policies_loaded", count=3)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    # Determine log level: explicit > debug flag > environment
    if level is not None:
        log_level = level
    elif debug:
        log_level = logging.DEBUG
    else:
        log_level = _get_log_level_from_env()

    # Logs go to stderr so command output on stdout stays parseable
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    shared_processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Not cached: the CLI reconfigures once a config file has been read
        cache_logger_on_first_use=False,
    )

    logger: structlog.stdlib.BoundLogger = structlog.get_logger()
    return logger


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a bound logger instance.

    Args:
        name: Optional logger name (defaults to module name)

    Returns:
        Bound logger instance
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger

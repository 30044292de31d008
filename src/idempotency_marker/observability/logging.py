"""Structured logging configuration for the idempotency middleware.

The middleware logs through structlog. Cache failures are reported on the
logger supplied in the configuration (this package's logger by default),
using stable event names so they are easy to alert on:

- ``idempotency.cache_read_error``: lookup failed, request ran unprotected
- ``idempotency.cache_write_error``: completion marker was not stored

Routine decisions (replay blocked, marker stored) are emitted at debug
level on the package logger.

Examples:
    Configure logging once at startup::

        from idempotency_marker.observability.logging import configure_logging

        configure_logging(level="INFO", json_output=True)

    Output for a failed lookup (JSON)::

        {
            "event": "idempotency.cache_read_error",
            "exception": "Traceback (most recent call last): ...",
            "level": "error",
            "timestamp": "2024-01-01T00:00:00.000000Z"
        }
"""

import logging
import sys
from typing import Any

import structlog

CACHE_READ_ERROR_EVENT = "idempotency.cache_read_error"
CACHE_WRITE_ERROR_EVENT = "idempotency.cache_write_error"


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, emit JSON logs; if False, use console format

    Examples:
        >>> configure_logging(level="DEBUG", json_output=False)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )

    processors: list[object] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        )
    else:
        # ConsoleRenderer formats exc_info itself
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        A structlog logger instance
    """
    return structlog.get_logger(name)


# Default error sink when the configuration does not provide one
logger = get_logger("idempotency_marker")

"""
Structured logging with structlog.

LOG_FORMAT=json for log aggregation, anything else for readable console output.
"""

import logging
import sys

import structlog

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def configure_logging(level: str = "INFO", log_format: str = "console") -> None:
    level = level.upper()
    if level not in _VALID_LOG_LEVELS:
        raise ValueError(f"Invalid LOG_LEVEL={level!r}. Must be one of {', '.join(sorted(_VALID_LOG_LEVELS))}.")

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

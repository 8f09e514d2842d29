"""
Structured logging configuration using structlog.

JSON lines when ``log_format`` is "json", coloured console output otherwise.
Everything goes to stdout.
"""

import logging
import sys

import structlog

from altcha_bench.config import settings


def setup_logging() -> None:
    """
    Configure structlog and stdlib logging integration.

    Call this once at application startup.
    """
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    level = getattr(logging, settings.log_level.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            # Correlation IDs bound by the request middleware
            structlog.contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn logs through stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

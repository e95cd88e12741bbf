"""structlog configuration.

Call configure_logging() once, early (the app factory and CLI do).
Request-scoped values bound via structlog.contextvars (the request id
from RequestIdMiddleware) are merged into every event.
"""

import logging
import sys

import structlog

from taskmanager.config import settings


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Route stdlib logging and structlog through one renderer."""
    level_name = (level or settings.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if json_logs is None:
        json_logs = settings.log_json or settings.environment != "development"

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

"""Logging configuration for the Imaginify persistence layer.

Events go to stderr so that command output on stdout (``health --json``)
stays machine readable.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import FilteringBoundLogger

from .config import config
from .exceptions import ConfigurationError

SERVICE_NAME = "imaginify-store"

# The driver logs every command at DEBUG through these stdlib loggers
DRIVER_LOGGERS = ("pymongo", "pymongo.command", "pymongo.connection", "pymongo.serverSelection")


def resolve_level(name: str, debug: bool = False) -> int:
    """Map a level name such as ``"info"`` to its numeric value."""
    if debug:
        return logging.DEBUG
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {name}", {"log_level": name})
    return level


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> FilteringBoundLogger:
    """Configure structured logging for the application.

    Arguments default to the ``LOG_LEVEL`` / ``LOG_FORMAT`` settings.
    """
    level = resolve_level(log_level or config.app.log_level, debug=config.app.debug)
    renderer_name = (log_format or config.app.log_format).lower()

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    for name in DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if renderer_name == "json":
        processors.extend([
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ])
    else:
        processors.extend([
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=SERVICE_NAME, environment=config.app.environment)

    return structlog.get_logger()


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a logger instance for the given name."""
    return structlog.get_logger(name)


logger = configure_logging()

"""Logging configuration module."""

from logging import (
    CRITICAL,
    DEBUG,
    ERROR,
    INFO,
    WARNING,
    Handler,
    Logger,
    StreamHandler,
    getLogger,
)
from typing import cast

import structlog
from structlog import dev, processors, stdlib
from structlog.contextvars import merge_contextvars
from structlog.processors import JSONRenderer, TimeStamper, dict_tracebacks
from structlog.stdlib import BoundLogger

# Define log levels
LOG_LEVELS: dict[str, int] = {
    "debug": DEBUG,
    "info": INFO,
    "warning": WARNING,
    "error": ERROR,
    "critical": CRITICAL,
}


def configure_logging(
    testing: bool = False, level: str = "INFO", json_logs: bool = True
) -> None:
    """Configure structured logging for the application.

    Args:
        testing: Whether the application is running in test mode
        level: Log level name, case-insensitive
        json_logs: Render JSON lines instead of key=value pairs
    """
    log_level = LOG_LEVELS.get(level.lower(), INFO)

    # Configure root logger
    root_logger: Logger = getLogger()
    root_logger.setLevel(log_level)

    # Create and configure package logger
    app_logger: Logger = getLogger("spec2bom")
    app_logger.setLevel(log_level)

    # Create handler
    handler: Handler = StreamHandler()
    handler.setLevel(log_level)

    # Define shared processors
    shared_processors = [
        merge_contextvars,
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
        dict_tracebacks,
    ]

    use_json = json_logs and not testing

    # Configure structlog
    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared_processors,
            processors.format_exc_info,
            JSONRenderer() if use_json else processors.KeyValueRenderer(),
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure handler formatter
    formatter = stdlib.ProcessorFormatter(
        processor=processors.JSONRenderer() if use_json else dev.ConsoleRenderer(),
        foreign_pre_chain=shared_processors,
    )
    handler.setFormatter(formatter)

    # Clear existing handlers to prevent duplicates
    root_logger.handlers = []
    app_logger.handlers = []

    root_logger.addHandler(handler)


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Optional logger name, usually ``__name__``

    Returns:
        A structured logger instance.
    """
    return cast(BoundLogger, structlog.get_logger(name))


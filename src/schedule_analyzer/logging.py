"""Structured logging configuration using structlog.

Logs go to stderr by default so that JSON results printed on stdout stay
machine-readable. All logging throughout the project should use get_logger()
instead of print().
"""

import logging
import sys
from typing import TextIO

import structlog

from src.schedule_analyzer.config import get_config

# Chatty third-party loggers kept at WARNING unless DEBUG is requested
QUIET_LOGGERS = ("urllib3", "requests")


def setup_logging(
    json_output: bool | None = None,
    log_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog with appropriate processors and output format.

    Args:
        json_output: If True, output JSON (production). If False, console format (dev).
            Defaults to the configured log_json.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the configured log_level.
        stream: Where log lines are written (default: sys.stderr).
    """
    config = get_config()
    if json_output is None:
        json_output = config.log_json
    level_name = (log_level or config.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    stream = stream or sys.stderr

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if json_output:
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        isatty = getattr(stream, "isatty", None)
        processors.append(structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty())))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=stream, level=numeric_level, force=True)
    quiet_level = numeric_level if numeric_level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance bound with the module name.

    Args:
        name: Logger name (typically __name__ from calling module).

    Returns:
        Configured structlog logger with module name context.
    """
    return structlog.get_logger(name)

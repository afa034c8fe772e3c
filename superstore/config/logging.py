"""
Logging Configuration for Superstore Profitability Analytics

Structured logging through structlog on top of the stdlib root logger.
Reports are printed on stdout by the runner, so every log line goes to
stderr.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from superstore.config.settings import Settings, get_settings

# Library loggers routed through our handler
SERVER_LOGGERS = ["uvicorn", "uvicorn.error", "uvicorn.access"]
DATABASE_LOGGERS = ["sqlalchemy.engine", "aiosqlite"]


def _app_context(settings: Settings):
    """Processor stamping every event with the application and environment"""
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("app", settings.app_name)
        event_dict.setdefault("env", settings.app_env)
        return event_dict
    return processor


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Override renderer ("json" or "text")
    """
    settings = get_settings()
    level = (log_level or settings.monitoring.log_level).upper()
    fmt = log_format or settings.monitoring.log_format
    numeric_level = getattr(logging, level, logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        _app_context(settings),
        TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if fmt == "json":
        renderer = JSONRenderer(default=str)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.propagate = False
        server_logger.setLevel(numeric_level)

    # SQL echo is controlled by DATABASE_ECHO, not by the application level
    database_level = logging.INFO if settings.database.echo else logging.WARNING
    for name in DATABASE_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, database_level))

    structlog.get_logger(__name__).debug("Logging configured", level=level, format=fmt)

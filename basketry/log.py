"""Logging configuration.

Library modules only call structlog.get_logger(__name__); applications call
configure_logging() once at startup.
"""

import logging
import os
import sys

import structlog


def get_log_level() -> str:
    """Log level from BASKETRY_LOG_LEVEL, else INFO."""
    return os.getenv("BASKETRY_LOG_LEVEL", "INFO").upper()


def setup_stdlib_logging(level: str) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def setup_structlog(json: bool = False) -> None:
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.contextvars.merge_contextvars,
    ]

    if json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(json: bool = False, level: str | None = None) -> None:
    """Configure stdlib + structlog. json=True for production log shipping."""
    setup_stdlib_logging(level or get_log_level())
    setup_structlog(json=json)


def bind_session(**kwargs: object) -> None:
    """Attach context (user_id, session_id) to every later log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


__all__ = ("configure_logging", "setup_structlog", "setup_stdlib_logging", "bind_session")

import logging
import sys
from typing import Optional

import structlog

from ..config import settings


def setup_logger(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog on top of the standard logging module.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to settings.LOG_LEVEL.
        log_format: "json" for production, "console" for development.
            Defaults to settings.LOG_FORMAT.
    """
    log_level = log_level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to the given name"""
    return structlog.get_logger(name)

"""
Shared structlog configuration.

Call ``configure_logging()`` once from an application entry point. Library
modules only ever call ``structlog.get_logger(__name__)``.
"""

import logging
import sys
from typing import Optional

import structlog

from lexprob.config import get_settings

_configured = False


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Route structlog through the stdlib logging module.

    Args:
        level: Log level name; defaults to ``settings.log_level``
        fmt: ``"json"`` or ``"console"``; defaults to ``settings.log_format``
    """
    global _configured
    if _configured:
        return

    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    renderer_name = fmt or settings.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if renderer_name == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True

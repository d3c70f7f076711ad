"""
log.py
------
structlog setup shared by every stage. Bound loggers go through the stdlib
logging module so the host process keeps control of handlers.
"""
import logging
from typing import Optional

import structlog

from .config import settings

JSON_ENVIRONMENTS = {"production", "staging"}


def use_json_renderer() -> bool:
    return settings.LOG_JSON or settings.APP_ENV.lower() in JSON_ENVIRONMENTS


def configure_logging(level: Optional[str] = None, json: Optional[bool] = None) -> None:
    level = level or settings.LOG_LEVEL
    if json is None:
        json = use_json_renderer()
    logging.basicConfig(format="%(message)s", level=level.upper())
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    return structlog.get_logger(name)

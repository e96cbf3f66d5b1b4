"""structlog setup for applications embedding the engine."""

import logging
from typing import Optional

import structlog

from .config import TaxifyConfig


def configure_logging(config: Optional[TaxifyConfig] = None) -> None:
    """Configure structlog to drop events below ``config.log_level``.

    Production renders JSON lines; other environments use the console
    renderer.
    """
    config = config or TaxifyConfig()
    level = logging.getLevelName(config.log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.is_production
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )

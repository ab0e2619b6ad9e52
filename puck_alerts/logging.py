"""
structlog setup for puck-alerts.

One JSON object per line on stdout. The poller talks to the NHL API every
few seconds, so httpx request logging is held at WARNING unless the service
itself runs at DEBUG.
"""

from __future__ import annotations

import logging

import structlog

from .config import settings

SERVICE_NAME = "puck-alerts"

_CHATTY_LIBRARIES = ("httpx", "httpcore")


def _normalize_log_level(level: str | None, environment: str) -> int:
    if level:
        name = level.strip().upper()
    else:
        name = "INFO" if environment.lower() == "production" else "DEBUG"
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_logging(level: str | None = None, environment: str | None = None) -> int:
    """Configure structlog and stdlib logging; returns the resolved level."""
    resolved = _normalize_log_level(level or settings.log_level, environment or settings.environment)
    logging.basicConfig(level=resolved)
    library_level = resolved if resolved <= logging.DEBUG else max(resolved, logging.WARNING)
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.EventRenamer("message"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolved),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    return resolved


configure_logging()

logger = structlog.get_logger().bind(
    logger=SERVICE_NAME,
    service=SERVICE_NAME,
    environment=settings.environment,
)

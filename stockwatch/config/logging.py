"""
Structured logging configuration using structlog.

Development gets colored console output, other environments get one JSON
object per line. Every event carries the app context and, for loggers
created with a component, a ``component`` field (``monitor``, ``alerts``,
``reorder``, ``change-feed``, ``storage``, ``api``) so the monitoring loop's
events can be filtered out of the request log.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from stockwatch.config.settings import get_settings

# Third-party loggers that are chatty at INFO/DEBUG
NOISY_LOGGERS = {
    "aiosqlite": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}

DEFAULT_COMPONENT = "app"


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add application context to log events."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def add_component(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Default the component field for loggers created without one."""
    event_dict.setdefault("component", DEFAULT_COMPONENT)
    return event_dict


def build_processors(json_logs: bool) -> list[Processor]:
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        add_component,
    ]
    if json_logs:
        return shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return shared_processors + [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(log_level: str | None = None) -> None:
    """
    Configure structlog for the application.

    Args:
        log_level: Overrides the configured level, e.g. ``"DEBUG"`` to see
            skipped and discarded monitoring cycles.
    """
    settings = get_settings()
    level = getattr(logging, (log_level or settings.log_level).upper())

    structlog.configure(
        processors=build_processors(json_logs=settings.environment != "development"),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)
    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, noisy_level))


def get_logger(
    name: str | None = None, component: str | None = None
) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, optionally bound to a component."""
    logger = structlog.get_logger(name)
    if component is not None:
        logger = logger.bind(component=component)
    return logger

"""
Structured logging for proration lookups.

structlog on top of the stdlib logging module. Amounts are Decimals, so a
processor renders them as exact strings before the JSON renderer sees them.
"""

import logging
from decimal import Decimal
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from prorated_renewals.settings import Settings, get_settings


def render_decimals(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Render Decimal values as plain strings (``9.86``, never ``9.860E+0``)."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = f"{value:f}"
    return event_dict


def setup_logging(config: Settings | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Hosts call this once at startup; importing the package never configures
    logging.

    Args:
        config: Settings to read ``observability`` from, defaults to the
            global settings
    """
    observability = (config or get_settings()).observability
    logging.basicConfig(format="%(message)s", level=observability.log_level.value)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        render_decimals,
    ]

    if observability.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **context: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger, optionally bound to initial context.

    Example:
        logger = get_logger(__name__, currency="USD")
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger


__all__ = ["render_decimals", "setup_logging", "get_logger"]

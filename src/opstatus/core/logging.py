"""
Structured logging for the status engine.

Every module logs through structlog: events are ``snake_case`` names with
keyword fields, rendered as JSON for log aggregation or as console output
during development. ``configure_from_settings`` applies the log knobs of
``StatusSettings``; ``LogContext`` scopes fields such as ``operator`` to a
block of code, which the publisher uses on its worker thread.

Examples:
    >>> from opstatus.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True, service="network")
    >>> logger = get_logger(__name__)
    >>> with LogContext(operator="network"):
    ...     logger.info("status_updated")

Tags:
    logging, structlog, observability, opstatus
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from opstatus.core.settings import StatusSettings

_SERVICE_NAME = "opstatus"


def _add_service_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _ecs_field_names(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Rename timestamp and level to their ECS field names."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "opstatus",
) -> None:
    """Configure structured logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for JSON unless
            stdout is a TTY
        service: Value of the ``service.name`` field
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_name,
    ]

    if json_format:
        processors += [
            _ecs_field_names,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    numeric_level = getattr(logging, level.upper())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # structlog hands rendered lines to stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level, force=True)


def configure_from_settings(settings: StatusSettings) -> None:
    """Apply ``log_level`` and ``log_json``; the service is the operator name."""
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        service=settings.operator_name,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


class LogContext:
    """Bind context variables for the duration of a ``with`` block.

    Values bound by an enclosing block are restored on exit, so contexts
    nest.
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._context)
        return self

    def __exit__(self, *args) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "LogContext",
]

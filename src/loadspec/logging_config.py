"""Structured logging configuration using structlog.

Provides JSON output for production and pretty console output for
development. Modules log with `logger.info("event", extra={...})`; the
`flatten_extra` processor lifts those keys into the event so that both
renderers show them as first-class fields.
"""

import logging
import sys
from typing import IO, Optional

import structlog
from structlog.types import EventDict, WrappedLogger

from loadspec import __version__


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the application name and version."""
    event_dict["app"] = "loadspec"
    event_dict["version"] = __version__
    return event_dict


def flatten_extra(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Merge an `extra` dict into the event; explicit event keys win."""
    extra = event_dict.pop("extra", None)
    if isinstance(extra, dict):
        for key, value in extra.items():
            event_dict.setdefault(key, value)
    elif extra is not None:
        event_dict["extra"] = extra
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: "production" selects JSON rendering, anything else the console renderer
        stream: Output stream (stdout if omitted)
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        flatten_extra,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level_int)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        extra={"log_level": log_level, "environment": environment, "renderer": "json" if is_production else "console"},
    )

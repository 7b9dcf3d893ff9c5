"""Structured logging configuration using structlog.

Production emits one JSON object per event; development renders to the
console with call-site details. Events from one source's poll run carry
`source_id` and `source_name` through `source_log_context`.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor

from caution_feed.core.config import Config, get_config

if TYPE_CHECKING:
    from caution_feed.services.feeds.base import FeedSourceInfo

# Per-request INFO lines from these would drown the sweep summaries
_NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "asyncio")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application name and environment to log events.

    Args:
        logger: Logger instance
        method_name: Name of the logging method
        event_dict: Event dictionary

    Returns:
        Updated event dictionary with app context
    """
    config = get_config()
    event_dict["app"] = config.app_name
    event_dict["env"] = config.app_env
    return event_dict


def _build_processors(config: Config) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if config.is_development:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    if config.is_production:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]
    return processors


def setup_logging() -> None:
    """Configure structlog over the standard library logging module.

    Example:
        >>> setup_logging()
        >>> logger = get_logger(__name__)
        >>> logger.info("Feed scheduler started", poll_sweep_seconds=300)
    """
    config = get_config()
    level = getattr(logging, config.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=_build_processors(config),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name (defaults to calling module)

    Returns:
        Configured structlog logger

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Feed fetched", source_name="FTC", entries=12)
    """
    return structlog.get_logger(name)


@contextmanager
def source_log_context(source: "FeedSourceInfo") -> Iterator[None]:
    """Bind a source's identity to every event logged inside the block.

    Context variables are task-local, so concurrent source runs inside
    one sweep do not see each other's bindings.

    Args:
        source: Source being polled
    """
    with structlog.contextvars.bound_contextvars(
        source_id=str(source.id), source_name=source.name
    ):
        yield


__all__ = [
    "add_app_context",
    "get_logger",
    "setup_logging",
    "source_log_context",
]

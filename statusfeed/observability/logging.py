"""
Structured logging configuration using structlog.

JSON lines in production, colored console output in development. All log
output goes to stderr; stdout is reserved for the rendered timeline.

Fetch jobs bind job_id and the CLI binds command via bind_context(), so every
event emitted while a job runs can be correlated without passing loggers
around.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from statusfeed.config.settings import Settings, get_settings

# Event keys whose values never reach a log sink
SECRET_KEYS = frozenset({"api_password", "password", "authorization", "auth"})

REDACTED = "***"

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def redact_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask credential values bound to an event."""
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def _renderer(settings: Settings) -> list[Processor]:
    if settings.is_production:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def setup_logging(settings: Settings | None = None) -> None:
    """
    Configure structlog and the stdlib logging bridge.

    Library modules log through logging.getLogger(__name__); the CLI and the
    fetch service use structlog directly. Both end up on stderr with the same
    level.

    Args:
        settings: Settings to read environment and log level from
            (defaults to get_settings())
    """
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ] + _renderer(settings)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    # Request lines from httpx are only wanted in debug runs
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if settings.debug else logging.WARNING)


def bind_context(**kwargs) -> None:
    """Bind key-value pairs to every subsequent event in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()

"""Structured logging for pitch-arena.

Every entry carries the service, environment and model in use. Session
operations bind ``session_id`` (and the arena) through structlog
contextvars, so log lines from the judging, host and summary code paths can
be traced back to a founder session without passing ids around.

Production and staging render JSON; anything else renders for the console.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from pitch_arena.core.config import Settings, get_settings


JSON_ENVIRONMENTS = ("production", "staging")

# Third-party loggers that only matter at WARNING and above
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor adding service, environment and model."""
    settings = get_settings()
    event_dict.setdefault("service", settings.service_name)
    event_dict.setdefault("environment", settings.environment)
    event_dict.setdefault("model", settings.llm_model)
    return event_dict


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _renderer(settings: Settings) -> list[Processor]:
    if settings.environment in JSON_ENVIRONMENTS:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        settings: Settings to read level and environment from. Uses
            get_settings() if not provided.
    """
    settings = settings or get_settings()
    level = _level(settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_service_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *_renderer(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_session_context(session_id: str, arena_id: str | None = None) -> None:
    """Attach session (and arena) ids to every log entry in this context."""
    context: dict[str, Any] = {"session_id": session_id}
    if arena_id:
        context["arena_id"] = arena_id
    structlog.contextvars.bind_contextvars(**context)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Panel turn complete", judges=["tech", "market"], elapsed_ms=840)
        ```
    """
    return structlog.get_logger(name)

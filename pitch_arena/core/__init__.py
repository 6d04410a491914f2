"""Core module - Configuration, logging, constants and exceptions.

Exports:
    - Settings, get_settings: Pydantic Settings configuration
    - configure_logging, get_logger: Structured logging (structlog)
    - API_PREFIX, API_VERSION, ServicePort: service constants
    - Exception classes: ArenaError, LLMProviderError, etc.
"""

from pitch_arena.core.config import Settings, get_settings
from pitch_arena.core.constants import API_PREFIX, API_VERSION, ServicePort
from pitch_arena.core.exceptions import (
    ArenaConfigInvalidError,
    ArenaConfigNotFoundError,
    ArenaError,
    InvalidTransitionError,
    LLMProviderError,
    SessionNotFoundError,
)
from pitch_arena.core.logging import configure_logging, get_logger


__all__ = [
    # Constants
    "API_PREFIX",
    "API_VERSION",
    # Exceptions
    "ArenaConfigInvalidError",
    "ArenaConfigNotFoundError",
    "ArenaError",
    "InvalidTransitionError",
    "LLMProviderError",
    "ServicePort",
    "SessionNotFoundError",
    # Configuration
    "Settings",
    # Logging
    "configure_logging",
    "get_logger",
    "get_settings",
]

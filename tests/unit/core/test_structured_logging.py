"""Unit tests for structured logging setup."""

import logging
from typing import Any
from unittest.mock import patch

import pytest
import structlog

from pitch_arena.core.config import Settings
from pitch_arena.core.logging import (
    NOISY_LOGGERS,
    add_service_context,
    bind_session_context,
    configure_logging,
    get_logger,
)


class TestAddServiceContext:

    def test_adds_service_environment_and_model(self) -> None:
        settings = Settings(service_name="pitch-arena", environment="staging", llm_model="m-1")
        with patch("pitch_arena.core.logging.get_settings", return_value=settings):
            event: dict[str, Any] = add_service_context(None, "info", {"event": "x"})  # type: ignore[arg-type]

        assert event == {"event": "x", "service": "pitch-arena", "environment": "staging", "model": "m-1"}

    def test_keeps_explicit_model(self) -> None:
        event = add_service_context(None, "info", {"event": "x", "model": "override"})  # type: ignore[arg-type]

        assert event["model"] == "override"


class TestConfigureLogging:

    def test_development_uses_console_renderer(self) -> None:
        configure_logging(Settings(environment="development"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    @pytest.mark.parametrize("environment", ["production", "staging"])
    def test_deployed_environments_use_json(self, environment: str) -> None:
        configure_logging(Settings(environment=environment))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_quiets_noisy_loggers(self) -> None:
        configure_logging(Settings(log_level="DEBUG"))

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestSessionContext:

    def test_binds_session_and_arena(self) -> None:
        structlog.contextvars.clear_contextvars()

        bind_session_context("s-1", "gemini")

        assert structlog.contextvars.get_contextvars() == {"session_id": "s-1", "arena_id": "gemini"}
        structlog.contextvars.clear_contextvars()

    def test_arena_optional(self) -> None:
        structlog.contextvars.clear_contextvars()

        bind_session_context("s-2")

        assert structlog.contextvars.get_contextvars() == {"session_id": "s-2"}
        structlog.contextvars.clear_contextvars()


class TestGetLogger:

    def test_logger_accepts_key_values(self) -> None:
        logger = get_logger(__name__)

        logger.info("Panel turn finished", session_id="abc", round=2)

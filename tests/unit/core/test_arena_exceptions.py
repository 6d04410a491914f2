"""Unit tests for the exception hierarchy."""

import pytest

from pitch_arena.core.exceptions import (
    ArenaConfigInvalidError,
    ArenaConfigNotFoundError,
    ArenaError,
    InvalidTransitionError,
    LLMProviderError,
    SessionNotFoundError,
)


class TestArenaError:

    @pytest.mark.parametrize(
        "error",
        [
            ArenaConfigNotFoundError("gemini"),
            ArenaConfigInvalidError("gemini", "bad"),
            LLMProviderError("boom", model="m"),
            SessionNotFoundError("abc"),
            InvalidTransitionError("rescore", "answering"),
        ],
    )
    def test_all_errors_are_arena_errors(self, error: Exception) -> None:
        assert isinstance(error, ArenaError)

    def test_arena_id_defaults_to_none(self) -> None:
        assert ArenaError("x").arena_id is None


class TestSpecificErrors:

    def test_not_found_keeps_path(self) -> None:
        error = ArenaConfigNotFoundError("hackathons/devpost")

        assert error.path == "hackathons/devpost"
        assert error.arena_id == "hackathons/devpost"
        assert "hackathons/devpost" in str(error)

    def test_invalid_keeps_reason(self) -> None:
        error = ArenaConfigInvalidError("gemini", "asset is not valid JSON")

        assert error.reason == "asset is not valid JSON"
        assert "asset is not valid JSON" in str(error)

    def test_provider_error_context(self) -> None:
        error = LLMProviderError("rate limited", model="m1", status_code=429, error_code="rate_limit")

        assert str(error) == "rate limited"
        assert error.model == "m1"
        assert error.status_code == 429
        assert error.error_code == "rate_limit"

    def test_invalid_transition_message(self) -> None:
        error = InvalidTransitionError("send a message", "ended")

        assert error.action == "send a message"
        assert error.phase == "ended"
        assert str(error) == "Cannot send a message while session is in phase 'ended'"

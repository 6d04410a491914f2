"""Custom exceptions for the Pitch Arena service.

All exceptions are namespaced under ArenaError so callers can catch any
arena failure with a single except clause.

Unparseable model output is not an error anywhere in the service: every
model consumer has a fixed fallback. These exceptions cover missing
configuration, transport failures and invalid session actions.
"""


class ArenaError(Exception):
    """Base exception for all arena-related errors."""

    def __init__(self, message: str, arena_id: str | None = None) -> None:
        """Initialize arena error.

        Args:
            message: Error description
            arena_id: Arena config the error relates to, if any
        """
        self.arena_id = arena_id
        super().__init__(message)


class ArenaConfigNotFoundError(ArenaError):
    """Raised when no arena config exists for a path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Arena config '{path}' not found", arena_id=path)


class ArenaConfigInvalidError(ArenaError):
    """Raised when an arena config exists but cannot be parsed or validated."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Arena config '{path}' is invalid: {reason}", arena_id=path)


class LLMProviderError(ArenaError):
    """Error from the hosted model with context for error handling.

    Distinct from parse failures: raised only when the gateway call itself
    fails (HTTP error status, timeout, connection problem).
    """

    def __init__(
        self,
        message: str,
        model: str,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize provider error.

        Args:
            message: Error description
            model: Model that was requested
            status_code: HTTP status returned by the gateway, if any
            error_code: Provider error code, if any
        """
        self.model = model
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class SessionNotFoundError(ArenaError):
    """Raised when a session id is unknown."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' not found")


class InvalidTransitionError(ArenaError):
    """Raised when an action is not allowed in the session's current phase."""

    def __init__(self, action: str, phase: str) -> None:
        self.action = action
        self.phase = phase
        super().__init__(f"Cannot {action} while session is in phase '{phase}'")


__all__ = [
    "ArenaConfigInvalidError",
    "ArenaConfigNotFoundError",
    "ArenaError",
    "InvalidTransitionError",
    "LLMProviderError",
    "SessionNotFoundError",
]

"""Map exceptions to ErrorResponse bodies.

Every failure leaves the API as ``{"error", "detail", "code", "path"}``.
Domain exceptions are looked up in ``ARENA_ERRORS``; FastAPI's own
HTTPException and request validation errors keep their status codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pitch_arena.core.exceptions import (
    ArenaConfigInvalidError,
    ArenaConfigNotFoundError,
    ArenaError,
    InvalidTransitionError,
    LLMProviderError,
    SessionNotFoundError,
)
from pitch_arena.core.logging import get_logger


logger = get_logger(__name__)


class ErrorResponse(BaseModel):
    error: str
    detail: str
    code: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class ErrorMapping:
    status: int
    code: str


ARENA_ERRORS: dict[type[ArenaError], ErrorMapping] = {
    ArenaConfigNotFoundError: ErrorMapping(404, "ARENA_NOT_FOUND"),
    ArenaConfigInvalidError: ErrorMapping(422, "ARENA_INVALID"),
    SessionNotFoundError: ErrorMapping(404, "SESSION_NOT_FOUND"),
    InvalidTransitionError: ErrorMapping(409, "INVALID_TRANSITION"),
    LLMProviderError: ErrorMapping(502, "LLM_PROVIDER_ERROR"),
}

# Short error names, e.g. 404 -> "NotFound"
ERROR_NAMES = {
    400: "BadRequest",
    404: "NotFound",
    409: "Conflict",
    422: "ValidationError",
    500: "InternalServerError",
    502: "BadGateway",
    503: "ServiceUnavailable",
}


def error_name(status_code: int) -> str:
    if status_code in ERROR_NAMES:
        return ERROR_NAMES[status_code]
    try:
        return HTTPStatus(status_code).phrase.replace(" ", "")
    except ValueError:
        return "Error"


def error_json(request: Request, status_code: int, detail: str, code: str | None = None) -> JSONResponse:
    body = ErrorResponse(
        error=error_name(status_code),
        detail=detail,
        code=code,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def describe_arena_error(exc: ArenaError) -> str:
    """Client-facing message for a domain exception."""
    if isinstance(exc, ArenaConfigNotFoundError):
        return f"Arena '{exc.path}' not found"
    if isinstance(exc, SessionNotFoundError):
        return f"Session '{exc.session_id}' not found"
    if isinstance(exc, LLMProviderError):
        return f"Model gateway error: {exc}"
    return str(exc)


# =============================================================================
# Handlers
# =============================================================================

async def handle_arena_error(request: Request, exc: ArenaError) -> JSONResponse:
    mapping = next(
        (m for cls, m in ARENA_ERRORS.items() if isinstance(exc, cls)),
        ErrorMapping(400, "ARENA_ERROR"),
    )
    code = mapping.code
    if isinstance(exc, LLMProviderError):
        code = exc.error_code or code
        logger.error("Model gateway failure", model=exc.model, status=exc.status_code, code=code)
    elif mapping.status >= 422:
        logger.warning("Arena request failed", code=code, error=str(exc))
    return error_json(request, mapping.status, describe_arena_error(exc), code)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return error_json(request, exc.status_code, str(exc.detail))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with one ``loc: msg`` entry per invalid field."""
    problems = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'Invalid value')}"
        for err in exc.errors()
    ]
    return error_json(request, 422, "; ".join(problems) or "Validation error", "VALIDATION_ERROR")


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", path=request.url.path, error_type=type(exc).__name__)
    return error_json(request, 500, "An unexpected error occurred", "INTERNAL_ERROR")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ArenaError, handle_arena_error)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected)


__all__ = [
    "ARENA_ERRORS",
    "ErrorResponse",
    "register_error_handlers",
]

"""Session API routes.

Service Endpoints:
- POST /v1/sessions - Create a session on an arena and start it
- GET /v1/sessions/{id} - Current session state
- POST /v1/sessions/{id}/messages - Send a founder message
- POST /v1/sessions/{id}/rescore - Rescore a finished round
- POST /v1/sessions/{id}/finish - End the session
- GET /v1/sessions/{id}/export/{kind} - conversation, prompts or report export

Every mutating endpoint returns the session state plus the messages the
call added.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pitch_arena.api.dependencies import get_session_manager
from pitch_arena.core.constants import API_PREFIX
from pitch_arena.core.logging import get_logger
from pitch_arena.session.manager import SessionManager
from pitch_arena.session.models import ChatMessage
from pitch_arena.session.state_machine import ArenaSession
from pitch_arena.session.transcript import EXPORTERS


logger = get_logger(__name__)


router = APIRouter(
    prefix=f"{API_PREFIX}/sessions",
    tags=["Sessions"],
)


# =============================================================================
# Request/Response Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request model for session creation.

    Attributes:
        arena: Arena path, e.g. ``gemini`` or ``hackathons/devpost``
        demo: Skip the warm-up and judge the built-in demo profile
        profile: Optional pre-parsed founder profile (e.g. extracted from a deck)
    """

    arena: str = Field(..., min_length=1, description="Arena path")
    demo: bool = Field(default=False, description="Use the demo profile")
    profile: dict[str, Any] | None = Field(default=None, description="Pre-parsed founder profile")


class SendMessageRequest(BaseModel):
    text: str = Field(..., description="Founder message")


class SessionResponse(BaseModel):
    """Session state plus the messages added by the call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session: dict[str, Any]
    new_messages: list[dict[str, Any]] = Field(default_factory=list)


def _response(session: ArenaSession, messages: list[ChatMessage]) -> SessionResponse:
    return SessionResponse(
        session=session.to_dict(),
        new_messages=[m.to_dict() for m in messages],
    )


# =============================================================================
# API Endpoints
# =============================================================================

@router.post(
    "",
    response_model=SessionResponse,
    response_model_by_alias=True,
    status_code=201,
    summary="Create session",
)
async def create_session(
    request: CreateSessionRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionResponse:
    session, messages = await manager.create(
        request.arena,
        demo=request.demo,
        profile=request.profile,
    )
    return _response(session, messages)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    response_model_by_alias=True,
    summary="Get session",
)
async def get_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionResponse:
    return _response(manager.get(session_id), [])


@router.post(
    "/{session_id}/messages",
    response_model=SessionResponse,
    response_model_by_alias=True,
    summary="Send founder message",
)
async def send_message(
    session_id: str,
    request: SendMessageRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionResponse:
    session, messages = await manager.handle_message(session_id, request.text)
    return _response(session, messages)


@router.post(
    "/{session_id}/rescore",
    response_model=SessionResponse,
    response_model_by_alias=True,
    summary="Rescore the finished round",
)
async def rescore_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionResponse:
    session, messages = await manager.rescore(session_id)
    return _response(session, messages)


@router.post(
    "/{session_id}/finish",
    response_model=SessionResponse,
    response_model_by_alias=True,
    summary="End the session",
)
async def finish_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionResponse:
    session, messages = await manager.finish(session_id)
    return _response(session, messages)


@router.get(
    "/{session_id}/export/{kind}",
    summary="Export session",
    description="kind is one of: conversation, prompts, report.",
)
async def export_session(
    session_id: str,
    kind: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict[str, Any]:
    exporter = EXPORTERS.get(kind)
    if exporter is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown export '{kind}'. Available: {', '.join(sorted(EXPORTERS))}",
        )
    session = manager.get(session_id)
    logger.info("Session exported", session_id=session_id, kind=kind)
    return exporter(session)


__all__ = [
    "CreateSessionRequest",
    "SendMessageRequest",
    "SessionResponse",
    "router",
]

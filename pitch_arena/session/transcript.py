"""Transcript building and JSON exports for a session."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pitch_arena.session.models import ChatMessage, MessageRole


if TYPE_CHECKING:
    from pitch_arena.session.state_machine import ArenaSession


def _responder_for(role: MessageRole) -> str:
    return MessageRole.USER.value if role == MessageRole.AI else MessageRole.AI.value


def build_interactions(messages: Iterable[ChatMessage]) -> list[dict[str, Any]]:
    """Pair consecutive non-system messages into question/answer interactions.

    Two messages in a row from the same role, and a trailing message, become
    interactions with ``answer`` set to None.
    """
    interactions: list[dict[str, Any]] = []
    pending: ChatMessage | None = None

    for message in messages:
        if message.role == MessageRole.SYSTEM:
            continue

        if pending is None:
            pending = message
            continue

        if pending.role == message.role:
            interactions.append({
                "questioner": pending.role.value,
                "responder": _responder_for(pending.role),
                "question": pending.text,
                "answer": None,
            })
            pending = message
            continue

        interactions.append({
            "questioner": pending.role.value,
            "responder": message.role.value,
            "question": pending.text,
            "answer": message.text,
        })
        pending = None

    if pending is not None:
        interactions.append({
            "questioner": pending.role.value,
            "responder": _responder_for(pending.role),
            "question": pending.text,
            "answer": None,
        })

    return interactions


def exported_at() -> str:
    return datetime.now(timezone.utc).isoformat()


def export_conversation(session: ArenaSession) -> dict[str, Any]:
    return {
        "exportedAt": exported_at(),
        "interactions": build_interactions(session.messages),
    }


def export_prompts(session: ArenaSession) -> dict[str, Any]:
    """Interactions plus every prompt-related event from the session log."""
    return {
        "exportedAt": exported_at(),
        "interactions": build_interactions(session.messages),
        "prompts": [e.to_dict() for e in session.events if "prompt" in e.type],
    }


def export_report(session: ArenaSession) -> dict[str, Any]:
    cfg = session.config
    return {
        "exportedAt": exported_at(),
        "arenaId": cfg.id if cfg else None,
        "arenaName": cfg.name if cfg else None,
        "summary": session.end_summary.to_dict() if session.end_summary else None,
        "coachReport": session.coach_report.to_dict() if session.coach_report else None,
        "judgeRuns": [r.to_dict() for r in session.all_runs],
        "profile": dict(session.profile),
    }


EXPORTERS = {
    "conversation": export_conversation,
    "prompts": export_prompts,
    "report": export_report,
}

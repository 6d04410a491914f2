"""Data models for arena sessions.

Provides:
- SessionPhase: Where a session is in its lifecycle
- ChatMessage: One line of the visible conversation
- JudgeRun: One answered judge question
- SessionEvent: Internal event log entry
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pitch_arena.judging.models import CriteriaCoverage


class SessionPhase(str, Enum):
    """Session lifecycle phase."""
    WARM_UP = "warm_up"
    AWAITING_PITCH = "awaiting_pitch"
    HOST_FILLER = "host_filler"
    JUDGING = "judging"
    ANSWERING = "answering"
    RESULTS = "results"
    RESCORING = "rescoring"
    ENDED = "ended"


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    AI = "ai"


@dataclass
class ChatMessage:
    """A single message in the session conversation.

    Attributes:
        role: system, user (founder) or ai (host or judge)
        title: Speaker label shown with the message
        text: Message content
        judge_id: Judge id for judge and host messages
        id: Unique message identifier
        timestamp: Unix time the message was added
    """
    role: MessageRole
    title: str
    text: str
    judge_id: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "title": self.title,
            "text": self.text,
            "judgeId": self.judge_id,
            "timestamp": self.timestamp,
        }


@dataclass
class JudgeRun:
    """One judge question and the founder's answer to it."""
    judge_id: str
    judge_label: str
    round: int
    score: float
    comment: str
    question: str
    answer: str
    asked_criteria_id: str | None = None
    coverage: list[CriteriaCoverage] = field(default_factory=list)
    delta: float | None = None

    @property
    def issue_id(self) -> str:
        """Concern being tracked for resolution: asked criterion, else the judge."""
        return self.asked_criteria_id or self.judge_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "judgeId": self.judge_id,
            "judgeLabel": self.judge_label,
            "round": self.round,
            "score": self.score,
            "comment": self.comment,
            "question": self.question,
            "answer": self.answer,
            "askedCriteriaId": self.asked_criteria_id,
            "coverage": [c.to_dict() for c in self.coverage],
            "delta": self.delta,
        }


@dataclass
class SessionEvent:
    ts: float
    type: str
    payload: Any

    def to_dict(self) -> dict[str, Any]:
        return {"ts": self.ts, "type": self.type, "payload": self.payload}

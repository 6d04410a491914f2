"""Data models for judge turns.

These are the normalized shapes the rest of the service works with. Raw
model replies never leave the judging package; they are normalized into
these dataclasses (or replaced by a fallback) first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CoverageStatus(str, Enum):
    """How well the founder has covered one criterion so far."""
    MISSING = "missing"
    PARTIAL = "partial"
    CLEAR = "clear"


class JudgeMode(str, Enum):
    """Discovery in the first round, interrogation afterwards."""
    DISCOVERY = "discovery"
    INTERROGATION = "interrogation"


class Verdict(str, Enum):
    PASS = "pass"
    MAYBE = "maybe"
    FAIL = "fail"


class ResolutionStatus(str, Enum):
    """Outcome of re-checking a judge's concern after the founder answered."""
    RESOLVED = "resolved"
    PARTIAL = "partial"
    UNRESOLVED = "unresolved"


@dataclass
class CriteriaCoverage:
    id: str
    status: CoverageStatus = CoverageStatus.MISSING
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "status": self.status.value}
        if self.note:
            data["note"] = self.note
        return data


@dataclass
class JudgeIntent:
    """Chair guidance injected into judge prompts for one round.

    Attributes:
        phase: Round phase name (e.g. ``clarify_core``)
        goal: One-line goal for the round
        primary_criteria: Criteria the judges should focus on
        secondary_criteria: Criteria worth touching if time allows
        aggressiveness: ``light``, ``medium`` or ``hard``
        reason: Why the planner picked this intent (logged, never prompted)
    """
    phase: str | None = None
    goal: str | None = None
    primary_criteria: list[str] = field(default_factory=list)
    secondary_criteria: list[str] = field(default_factory=list)
    aggressiveness: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase,
            "goal": self.goal,
            "primaryCriteria": list(self.primary_criteria),
            "secondaryCriteria": list(self.secondary_criteria),
            "aggressiveness": self.aggressiveness,
            "reason": self.reason,
        }


@dataclass
class JudgeTurnArgs:
    """Inputs shared by every judge in a panel turn."""
    profile: dict[str, Any] = field(default_factory=dict)
    last_delta: str | None = None
    memory: Any = None
    mode: JudgeMode = JudgeMode.DISCOVERY
    round: int | None = None
    max_rounds: int | None = None
    intent: JudgeIntent | None = None


@dataclass
class JudgeTurnResult:
    """Normalized result for one judge."""
    judge: str
    score: float
    comment: str
    question: str
    coverage: list[CriteriaCoverage] = field(default_factory=list)
    asked_criteria_id: str | None = None
    verdict_hint: Verdict | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "judge": self.judge,
            "score": self.score,
            "comment": self.comment,
            "question": self.question,
            "coverage": [c.to_dict() for c in self.coverage],
            "askedCriteriaId": self.asked_criteria_id,
            "verdictHint": self.verdict_hint.value if self.verdict_hint else None,
        }


@dataclass
class PanelTurnResult:
    """Panel output, one result per requested judge in request order.

    Attributes:
        panel: Normalized per-judge results
        raw: The model reply text, when a call was made
        parsed: False when every judge fell back
    """
    panel: list[JudgeTurnResult] = field(default_factory=list)
    raw: str | None = None
    parsed: bool = True


@dataclass
class JudgeMemoryLite:
    """Single-judge memory carried between turns."""
    asked_criteria_ids: list[str] = field(default_factory=list)
    covered: list[CriteriaCoverage] = field(default_factory=list)
    last_question: str | None = None
    last_score: float | None = None

"""Panel-wide memory carried between judge turns.

The memory is treated as immutable: ``update_arena_memory`` returns a new
object so a session can keep the previous one for logging or retries.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field, replace
from typing import Any

from pitch_arena.core.constants import PromptLimits
from pitch_arena.judging.models import CoverageStatus, JudgeTurnResult


_WHITESPACE = re.compile(r"\s+")
_FILLER_WORDS = re.compile(
    r"\b(what|whats|how|why|when|who|where|could|would|should|do|does|did|please)\b"
)


@dataclass(frozen=True)
class HostNote:
    """Founder answer to a host filler question."""
    question: str
    answer: str
    round: int

    def to_dict(self) -> dict[str, Any]:
        return {"q": self.question, "a": self.answer, "round": self.round}


@dataclass(frozen=True)
class LastTurn:
    question: str
    answer: str
    asked_criteria_id: str | None = None
    score: float | None = None
    ts: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "answer": self.answer,
            "askedCriteriaId": self.asked_criteria_id,
            "score": self.score,
            "ts": self.ts,
        }


@dataclass(frozen=True)
class ArenaMemory:
    """Anti-repeat state and latest understanding for the whole panel.

    Attributes:
        asked_criteria_ids: Last N criteria asked by any judge
        asked_questions: Last N question fingerprints
        last_by_judge: Latest Q/A per judge id
        host_notes: Answers to host filler questions
        coverage_by_criteria: Latest coverage status per criterion id
        resolved_issue_ids: Issues marked resolved during rescoring, per judge
    """
    asked_criteria_ids: tuple[str, ...] = ()
    asked_questions: tuple[str, ...] = ()
    last_by_judge: dict[str, LastTurn] = field(default_factory=dict)
    host_notes: tuple[HostNote, ...] = ()
    coverage_by_criteria: dict[str, CoverageStatus] = field(default_factory=dict)
    resolved_issue_ids: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def with_host_note(self, note: HostNote) -> ArenaMemory:
        return replace(self, host_notes=(*self.host_notes, note))

    def with_resolved(self, judge_id: str, issue_id: str) -> ArenaMemory:
        existing = self.resolved_issue_ids.get(judge_id, ())
        if issue_id in existing:
            return self
        resolved = dict(self.resolved_issue_ids)
        resolved[judge_id] = (*existing, issue_id)
        return replace(self, resolved_issue_ids=resolved)

    def to_dict(self) -> dict[str, Any]:
        return {
            "askedCriteriaIds": list(self.asked_criteria_ids),
            "askedQuestions": list(self.asked_questions),
            "lastByJudge": {k: v.to_dict() for k, v in self.last_by_judge.items()},
            "hostNotes": [n.to_dict() for n in self.host_notes],
            "coverageByCriteria": {k: v.value for k, v in self.coverage_by_criteria.items()},
            "resolvedIssueIds": {k: list(v) for k, v in self.resolved_issue_ids.items()},
        }


def fingerprint(question: str | None) -> str:
    """Rough anti-repeat key for a question.

    Lower-cases, collapses whitespace, drops punctuation, then drops
    interrogatives and filler words so rephrasings of the same question
    collide.
    """
    text = _WHITESPACE.sub(" ", str(question or "").lower())
    text = "".join(ch for ch in text if ch.isalnum() or ch.isspace())
    text = _FILLER_WORDS.sub("", text)
    return text.strip()[:PromptLimits.FINGERPRINT_CHARS]


def trim_tail(items: list[str], keep: int) -> tuple[str, ...]:
    if keep <= 0:
        return ()
    return tuple(items[-keep:])


def update_arena_memory(
    memory: ArenaMemory,
    judge_id: str,
    turn: JudgeTurnResult,
    answer: str,
    keep_last_criteria: int = 10,
    keep_last_questions: int = 10,
) -> ArenaMemory:
    """Return a new memory with one answered judge turn folded in.

    Args:
        memory: Current memory (left unchanged).
        judge_id: Judge that asked the question.
        turn: The judge's normalized turn.
        answer: Founder answer.
        keep_last_criteria: Tail length for asked criteria ids.
        keep_last_questions: Tail length for question fingerprints.

    Returns:
        Updated ArenaMemory. Host notes and resolved issues carry forward.
    """
    asked_criteria = list(memory.asked_criteria_ids)
    if turn.asked_criteria_id:
        asked_criteria.append(turn.asked_criteria_id)

    asked_questions = [*memory.asked_questions, fingerprint(turn.question)]

    coverage = dict(memory.coverage_by_criteria)
    for entry in turn.coverage:
        if entry.id:
            coverage[entry.id] = entry.status

    last_by_judge = dict(memory.last_by_judge)
    last_by_judge[judge_id] = LastTurn(
        question=turn.question,
        answer=(answer or "").strip(),
        asked_criteria_id=turn.asked_criteria_id,
        score=turn.score,
        ts=time.time(),
    )

    return replace(
        memory,
        asked_criteria_ids=trim_tail(asked_criteria, keep_last_criteria),
        asked_questions=trim_tail(asked_questions, keep_last_questions),
        last_by_judge=last_by_judge,
        coverage_by_criteria=coverage,
    )

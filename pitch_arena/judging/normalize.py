"""Normalizers applied to raw judge output."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from typing import Any

from pitch_arena.arena.models import JudgeCriterion
from pitch_arena.core.constants import PromptLimits, SCORE_MAX, SCORE_MIN
from pitch_arena.judging.models import CoverageStatus, CriteriaCoverage, Verdict
from pitch_arena.parsing.text import to_text


_FIRST_SENTENCE = re.compile(r"^(.+?[.!?])(\s|$)", re.DOTALL)


def to_number(value: Any) -> float:
    """Numeric form of a model value; NaN when it is not a number."""
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def round_tenth(value: float) -> float:
    """Round to one decimal with halves going up (6.25 -> 6.3, -0.25 -> -0.2)."""
    return math.floor(value * 10 + 0.5) / 10


def clamp_score(value: Any) -> float:
    """Clamp to [0, 10] rounded to one decimal; non-finite values become 0."""
    number = to_number(value)
    if not math.isfinite(number):
        number = 0.0
    return max(SCORE_MIN, min(SCORE_MAX, round_tenth(number)))


def one_sentence(question: Any) -> str:
    text = to_text(question)
    if not text:
        return text
    match = _FIRST_SENTENCE.match(text)
    return match.group(1).strip() if match else text


def normalize_verdict_hint(value: Any) -> Verdict | None:
    """Map free text to pass/maybe/fail; None when empty."""
    text = to_text(value).lower()
    if not text:
        return None
    if "pass" in text or "go" in text or "strong" in text:
        return Verdict.PASS
    if "fail" in text or "no" in text or "reject" in text:
        return Verdict.FAIL
    return Verdict.MAYBE


def normalize_verdict(value: Any) -> Verdict:
    return normalize_verdict_hint(value) or Verdict.MAYBE


def _coverage_status(value: Any) -> CoverageStatus:
    text = to_text(value).lower()
    if "clear" in text:
        return CoverageStatus.CLEAR
    if "partial" in text:
        return CoverageStatus.PARTIAL
    return CoverageStatus.MISSING


def normalize_coverage(
    rows: Any,
    criteria: Sequence[JudgeCriterion],
) -> list[CriteriaCoverage]:
    """One coverage entry per criterion, in criteria order.

    Rows without an id are dropped, a later row for the same id wins, and
    criteria the model did not mention default to ``missing``.
    """
    by_id: dict[str, CriteriaCoverage] = {}

    if isinstance(rows, list):
        for row in rows:
            if not isinstance(row, dict):
                continue
            criterion_id = to_text(row.get("id"))
            if not criterion_id:
                continue
            note = row.get("note")
            by_id[criterion_id] = CriteriaCoverage(
                id=criterion_id,
                status=_coverage_status(row.get("status")),
                note=to_text(note)[:PromptLimits.COVERAGE_NOTE_CHARS] if note else None,
            )

    return [by_id.get(c.id) or CriteriaCoverage(id=c.id) for c in criteria]

"""Score helpers for judge turns and runs."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from pitch_arena.core.constants import COVERAGE_SCORE_WEIGHTS
from pitch_arena.judging.normalize import round_tenth, to_number


def _coverage_weight(status: Any) -> float:
    text = str(getattr(status, "value", status) or "").lower()
    if "clear" in text:
        return COVERAGE_SCORE_WEIGHTS["clear"]
    if "partial" in text:
        return COVERAGE_SCORE_WEIGHTS["partial"]
    return COVERAGE_SCORE_WEIGHTS["missing"]


def score_from_turn(turn: Any) -> float:
    """Score for a judge turn.

    A positive finite model score wins. Otherwise the score is derived from
    coverage (clear 9, partial 6, missing 3, averaged to one decimal).
    Without coverage the score is 0.
    """
    raw = to_number(getattr(turn, "score", None) or 0)
    if math.isfinite(raw) and raw > 0:
        return raw

    coverage = list(getattr(turn, "coverage", None) or [])
    if not coverage:
        return 0.0

    total = sum(_coverage_weight(getattr(c, "status", None)) for c in coverage)
    return round_tenth(total / len(coverage))


def avg(values: Iterable[float]) -> float:
    """Mean of the finite values; 0 for none."""
    finite = [v for v in values if isinstance(v, (int, float)) and math.isfinite(v)]
    if not finite:
        return 0.0
    return sum(finite) / len(finite)

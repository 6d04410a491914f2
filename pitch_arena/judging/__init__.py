"""Judging - panel and single-judge turns, normalization and scoring."""

from pitch_arena.judging.judge import JudgeService
from pitch_arena.judging.models import (
    CoverageStatus,
    CriteriaCoverage,
    JudgeIntent,
    JudgeMemoryLite,
    JudgeMode,
    JudgeTurnArgs,
    JudgeTurnResult,
    PanelTurnResult,
    ResolutionStatus,
    Verdict,
)
from pitch_arena.judging.panel import PanelJudgeService, fallback_for
from pitch_arena.judging.resolution import ResolutionEvaluator
from pitch_arena.judging.scoring import avg, score_from_turn


__all__ = [
    "CoverageStatus",
    "CriteriaCoverage",
    "JudgeIntent",
    "JudgeMemoryLite",
    "JudgeMode",
    "JudgeService",
    "JudgeTurnArgs",
    "JudgeTurnResult",
    "PanelJudgeService",
    "PanelTurnResult",
    "ResolutionEvaluator",
    "ResolutionStatus",
    "Verdict",
    "avg",
    "fallback_for",
    "score_from_turn",
]

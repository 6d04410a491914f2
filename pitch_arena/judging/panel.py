"""
Panel Judge Service - One model call for a whole judge panel.

The panel prompt asks the model for ``{"panel": [...]}`` with one entry per
judge. The reply is matched back to the requested judges by id; anything
missing or unparseable is replaced by that judge's fixed fallback, so the
result always holds exactly one entry per requested judge, in request order.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

from pitch_arena.arena.models import ArenaConfig, JudgeConfig
from pitch_arena.core.constants import (
    FALLBACK_COMMENT,
    FALLBACK_QUESTION,
    FALLBACK_SCORE,
)
from pitch_arena.core.logging import get_logger
from pitch_arena.judging.models import (
    CriteriaCoverage,
    JudgeTurnArgs,
    JudgeTurnResult,
    PanelTurnResult,
    Verdict,
)
from pitch_arena.judging.normalize import (
    clamp_score,
    normalize_coverage,
    normalize_verdict_hint,
    one_sentence,
)
from pitch_arena.judging.prompts import build_panel_system, build_panel_user
from pitch_arena.llm.client import TextPrompt
from pitch_arena.parsing.json_coercion import parse_json
from pitch_arena.parsing.text import to_text


logger = get_logger(__name__)


def fallback_for(cfg: ArenaConfig, judge: JudgeConfig) -> JudgeTurnResult:
    """Fixed result used when a judge has no usable model output."""
    criteria = cfg.criteria_for(judge)
    return JudgeTurnResult(
        judge=judge.id,
        score=FALLBACK_SCORE,
        comment=FALLBACK_COMMENT,
        question=FALLBACK_QUESTION,
        coverage=[CriteriaCoverage(id=c.id) for c in criteria],
        asked_criteria_id=criteria[0].id if criteria else None,
        verdict_hint=Verdict.MAYBE,
    )


def normalize_result(
    raw: dict[str, Any],
    cfg: ArenaConfig,
    judge: JudgeConfig,
) -> JudgeTurnResult:
    """Normalize one raw judge entry against that judge's criteria.

    Args:
        raw: Decoded judge object from the model reply.
        cfg: Arena config (criteria lookup).
        judge: The judge the entry belongs to.

    Returns:
        Normalized result; blank fields take the fallback values.
    """
    fallback = fallback_for(cfg, judge)
    score = raw.get("score")

    return JudgeTurnResult(
        judge=judge.id,
        score=clamp_score(fallback.score if score is None else score),
        comment=to_text(raw.get("comment")) or fallback.comment,
        question=one_sentence(to_text(raw.get("question")) or fallback.question),
        coverage=normalize_coverage(raw.get("coverage"), cfg.criteria_for(judge)),
        asked_criteria_id=to_text(raw.get("askedCriteriaId")) or fallback.asked_criteria_id,
        verdict_hint=normalize_verdict_hint(raw.get("verdictHint")),
    )


def _find_entry(entries: list[Any], judge_id: str) -> dict[str, Any] | None:
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if entry.get("judge") == judge_id or entry.get("judgeId") == judge_id:
            return entry
    return None


class PanelJudgeService:
    """Runs a whole judge panel with a single model call."""

    def __init__(self, llm: TextPrompt) -> None:
        self._llm = llm

    async def run_panel_turn(
        self,
        cfg: ArenaConfig,
        judges: Sequence[JudgeConfig],
        args: JudgeTurnArgs,
    ) -> PanelTurnResult:
        """Score every judge in ``judges`` for the current founder state.

        Args:
            cfg: Arena config.
            judges: Judges to run, in the order results must be returned.
            args: Profile, context payload, mode and chair intent.

        Returns:
            PanelTurnResult with one result per judge. ``parsed`` is False
            when the whole panel fell back.
        """
        system = build_panel_system(cfg, judges, args)
        user = build_panel_user(args)
        judge_ids = [j.id for j in judges]
        started = time.perf_counter()

        try:
            raw = await self._llm.text_prompt(user, system, purpose="panel")
        except Exception as exc:
            logger.warning(
                "Panel call failed, using fallbacks",
                judges=judge_ids,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return PanelTurnResult(
                panel=[fallback_for(cfg, j) for j in judges],
                raw=None,
                parsed=False,
            )

        obj = parse_json(raw)
        entries = obj.get("panel") if isinstance(obj, dict) else None

        if not isinstance(entries, list):
            logger.warning("Panel reply unparseable, using fallbacks", judges=judge_ids)
            return PanelTurnResult(
                panel=[fallback_for(cfg, j) for j in judges],
                raw=raw,
                parsed=False,
            )

        results: list[JudgeTurnResult] = []
        missing: list[str] = []
        for judge in judges:
            entry = _find_entry(entries, judge.id)
            if entry is None:
                missing.append(judge.id)
                results.append(fallback_for(cfg, judge))
            else:
                results.append(normalize_result(entry, cfg, judge))

        logger.info(
            "Panel turn complete",
            judges=judge_ids,
            missing=missing,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )
        return PanelTurnResult(panel=results, raw=raw, parsed=True)

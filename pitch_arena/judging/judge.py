"""Single-judge turns, used when a judge has to be re-run on its own."""

from __future__ import annotations

from pitch_arena.arena.models import ArenaConfig, JudgeConfig
from pitch_arena.core.constants import PromptLimits
from pitch_arena.core.exceptions import LLMProviderError
from pitch_arena.core.logging import get_logger
from pitch_arena.judging.models import JudgeMemoryLite, JudgeTurnArgs, JudgeTurnResult
from pitch_arena.judging.panel import fallback_for, normalize_result
from pitch_arena.judging.prompts import build_judge_system, build_judge_user
from pitch_arena.llm.client import TextPrompt
from pitch_arena.parsing.json_coercion import parse_json


logger = get_logger(__name__)


class JudgeService:
    """Runs one judge per model call."""

    def __init__(self, llm: TextPrompt) -> None:
        self._llm = llm

    async def run_turn(
        self,
        cfg: ArenaConfig,
        judge: JudgeConfig,
        args: JudgeTurnArgs,
    ) -> JudgeTurnResult:
        """Score one judge; same normalization and fallback as the panel."""
        system = build_judge_system(cfg, judge, args)
        user = build_judge_user(args)

        try:
            raw = await self._llm.text_prompt(user, system, purpose=f"judge:{judge.id}")
        except LLMProviderError as exc:
            logger.warning("Judge call failed, using fallback", judge=judge.id, error=str(exc))
            return fallback_for(cfg, judge)

        obj = parse_json(raw)
        if not isinstance(obj, dict):
            logger.warning("Judge reply unparseable, using fallback", judge=judge.id)
            return fallback_for(cfg, judge)

        return normalize_result(obj, cfg, judge)

    @staticmethod
    def next_memory(prev: JudgeMemoryLite | None, result: JudgeTurnResult) -> JudgeMemoryLite:
        """Carry the judge's memory forward, keeping the last few asked criteria."""
        asked = list(prev.asked_criteria_ids) if prev else []
        if result.asked_criteria_id:
            asked.append(result.asked_criteria_id)

        return JudgeMemoryLite(
            asked_criteria_ids=asked[-PromptLimits.JUDGE_MEMORY_ASKED:],
            covered=list(result.coverage),
            last_question=result.question,
            last_score=result.score,
        )

"""
End-of-session reports.

Two independent model calls run once a session ends:
- SummaryGenerator - the panel chair's verdict and next step
- CoachService - how well the founder pitched, with fixes and a drill

Both degrade to a fallback (or nothing) when the model fails.
"""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from pitch_arena.arena.models import ArenaConfig
from pitch_arena.core.constants import SUMMARY_FALLBACK_NEXT_STEP, SUMMARY_UNAVAILABLE
from pitch_arena.core.exceptions import LLMProviderError
from pitch_arena.core.logging import get_logger
from pitch_arena.judging.models import Verdict
from pitch_arena.judging.normalize import normalize_verdict, round_tenth, to_number
from pitch_arena.llm.client import TextPrompt
from pitch_arena.parsing.json_coercion import coerce_json
from pitch_arena.parsing.text import to_text
from pitch_arena.session.models import JudgeRun


logger = get_logger(__name__)


# =============================================================================
# Chair summary
# =============================================================================


SUMMARY_SYSTEM = "\n".join([
    "You are the Pitch Arena panel chair.",
    "Return ONLY valid JSON. No markdown. No code fences.",
    "Use short practical language.",
    "",
    "JSON schema:",
    json.dumps({
        "finalScore": 0,
        "verdict": "maybe",
        "oneLiner": "...",
        "topStrength": "...",
        "topRisk": "...",
        "nextStep24h": "...",
    }),
    "",
    "Verdict must be one of: pass, maybe, fail.",
])


@dataclass
class EndSummary:
    final_score: float
    verdict: Verdict
    one_liner: str
    top_strength: str
    top_risk: str
    next_step_24h: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "finalScore": self.final_score,
            "verdict": self.verdict.value,
            "oneLiner": self.one_liner,
            "topStrength": self.top_strength,
            "topRisk": self.top_risk,
            "nextStep24h": self.next_step_24h,
        }


@dataclass
class SummaryResult:
    summary: EndSummary
    message_text: str | None = None


def fallback_summary(final_score: float) -> EndSummary:
    return EndSummary(
        final_score=round_tenth(final_score),
        verdict=Verdict.MAYBE,
        one_liner=SUMMARY_UNAVAILABLE,
        top_strength="",
        top_risk="",
        next_step_24h=SUMMARY_FALLBACK_NEXT_STEP,
    )


def _or_default(value: Any, default: str) -> Any:
    return default if value is None else value


def format_summary_message(summary: EndSummary) -> str:
    return (
        f"{summary.verdict.value.upper()} • {summary.one_liner}\n\n"
        f"Strength: {summary.top_strength}\n"
        f"Risk: {summary.top_risk}\n"
        f"Next 24h: {summary.next_step_24h}"
    )


class SummaryGenerator:
    """Builds the chair's end summary from the session's judge runs."""

    def __init__(self, llm: TextPrompt, max_runs: int = 6) -> None:
        self._llm = llm
        self._max_runs = max_runs

    def build_user(
        self,
        final_score: float,
        cfg: ArenaConfig | None,
        profile: dict[str, Any],
        judge_runs: Sequence[JudgeRun],
    ) -> str:
        objective = cfg.objective.thesis if cfg and cfg.objective else ""
        recent = [run.to_dict() for run in list(judge_runs)[-self._max_runs:]]
        return "\n".join([
            f"ARENA: {cfg.name if cfg else ''}",
            f"OBJECTIVE: {objective}",
            "",
            "FOUNDER PROFILE:",
            json.dumps(profile or {}, ensure_ascii=False),
            "",
            f"FINAL SCORE: {round_tenth(final_score)}",
            "",
            "ROUNDS:",
            json.dumps(recent, ensure_ascii=False),
        ])

    async def build(
        self,
        final_score: float,
        cfg: ArenaConfig | None,
        profile: dict[str, Any],
        judge_runs: Sequence[JudgeRun],
    ) -> SummaryResult:
        """Generate the end summary.

        Args:
            final_score: Average run score (rounded to one decimal here).
            cfg: Arena config, for name and objective.
            profile: Founder profile.
            judge_runs: Every run of the session; only the last few are sent.

        Returns:
            SummaryResult. On any model or parse failure the summary is the
            fallback and ``message_text`` is None.
        """
        fallback = fallback_summary(final_score)
        user = self.build_user(final_score, cfg, profile, judge_runs)

        try:
            raw = await self._llm.text_prompt(user, SUMMARY_SYSTEM, purpose="summary")
        except LLMProviderError as exc:
            logger.warning("Summary call failed", error=str(exc))
            return SummaryResult(summary=fallback)

        obj = coerce_json(raw, None)
        if not isinstance(obj, dict):
            return SummaryResult(summary=fallback)

        summary = EndSummary(
            final_score=fallback.final_score,
            verdict=normalize_verdict(obj.get("verdict")),
            one_liner=to_text(_or_default(obj.get("oneLiner"), fallback.one_liner)),
            top_strength=to_text(obj.get("topStrength")),
            top_risk=to_text(obj.get("topRisk")),
            next_step_24h=to_text(_or_default(obj.get("nextStep24h"), fallback.next_step_24h)),
        )
        return SummaryResult(summary=summary, message_text=format_summary_message(summary))


# =============================================================================
# Coach
# =============================================================================


COACH_SYSTEM = """
You are the Pitch Coach.

Your job: rate HOW WELL the founder pitched (clarity, structure, concreteness, focus), not whether the idea is good.
You are not part of the judge panel. Do not ask questions. This is an end-of-session debrief only.

You will be given:
1) Arena style rules (banned phrases, max words).
2) A canonical criteria list (id, label, description, signals).
3) The founder’s pitch and a short transcript excerpt of their answers.

Your output MUST be valid JSON only (no markdown, no extra text).

Tone:
- Human, candid, helpful, slightly tough.
- No therapy language. No meta talk about being a coach.
- No jargon. It should read like a real person talking.

Hard rules:
- Do not use any banned phrases from the arena.
- Keep the summary as spoken language, not a rubric explanation.
- If the transcript is missing, still produce scores but say what was missing in "gaps".

Scoring:
- Score overall from 1 to 10 (integer).
- Score 4 to 7 criteria from the canonical list that most impacted pitch quality.
- For each selected criterion: score 1 to 10 and one short note (max 18 words) about pitch execution.

Actionability:
- Provide exactly 2 "fixes" (each 1 sentence, concrete).
- Provide exactly 1 "drill" (1 sentence exercise they can repeat).

Output JSON schema (exact keys):
{
  "coach": {
    "overallScore": 0,
    "summary": "",
    "strength": ["", ""],
    "fixes": ["", ""],
    "drill": "",
    "gaps": ["", ""],
    "criteria": [
      { "id": "", "label": "", "score": 0, "note": "" }
    ]
  }
}

Validation:
- Every criteria.id must exist in the provided canonical criteria list.
- Use the provided label exactly for each selected criterion.
- Integers only for scores.
""".strip()


@dataclass
class CoachCriterionScore:
    id: str
    label: str
    score: float
    note: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "score": self.score, "note": self.note}


@dataclass
class CoachReport:
    overall_score: float
    summary: str = ""
    strength: list[str] = field(default_factory=list)
    fixes: list[str] = field(default_factory=list)
    drill: str = ""
    gaps: list[str] = field(default_factory=list)
    criteria: list[CoachCriterionScore] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "coach": {
                "overallScore": self.overall_score,
                "summary": self.summary,
                "strength": list(self.strength),
                "fixes": list(self.fixes),
                "drill": self.drill,
                "gaps": list(self.gaps),
                "criteria": [c.to_dict() for c in self.criteria],
            }
        }


def _text_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [to_text(item) for item in value if to_text(item)]


def _score(value: Any) -> float:
    number = to_number(value if value is not None else 0)
    return number if math.isfinite(number) else 0.0


def parse_coach_report(raw: Any) -> CoachReport | None:
    """CoachReport from a reply shaped ``{"coach": {...}}``; None otherwise."""
    obj = coerce_json(raw, None)
    coach = obj.get("coach") if isinstance(obj, dict) else None
    if not isinstance(coach, dict):
        return None

    criteria: list[CoachCriterionScore] = []
    for row in coach.get("criteria") or []:
        if not isinstance(row, dict):
            continue
        label = to_text(row.get("label")) or to_text(row.get("id"))
        if not label:
            continue
        criteria.append(CoachCriterionScore(
            id=to_text(row.get("id")),
            label=label,
            score=_score(row.get("score")),
            note=to_text(row.get("note")),
        ))

    return CoachReport(
        overall_score=_score(coach.get("overallScore")),
        summary=to_text(coach.get("summary")),
        strength=_text_list(coach.get("strength")),
        fixes=_text_list(coach.get("fixes")),
        drill=to_text(coach.get("drill")),
        gaps=_text_list(coach.get("gaps")),
        criteria=criteria,
    )


def _format_score(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def format_coach_message(report: CoachReport) -> str:
    """Plain-text rendering of a coach report for the conversation."""
    criteria_lines = [
        f"{c.label}: {_format_score(c.score)}/10" + (f" - {c.note}" if c.note else "")
        for c in report.criteria
    ]
    lines = [
        f"Coach score: {_format_score(report.overall_score)}/10",
        f"Summary: {report.summary}" if report.summary else "",
        f"Strengths: {' | '.join(report.strength)}" if report.strength else "",
        f"Fixes: {' | '.join(report.fixes)}" if report.fixes else "",
        f"Drill: {report.drill}" if report.drill else "",
        f"Gaps: {' | '.join(report.gaps)}" if report.gaps else "",
        "Criteria:\n" + "\n".join(criteria_lines) if criteria_lines else "",
    ]
    return "\n".join(line for line in lines if line)


class CoachService:
    """Rates pitch delivery once the session is over."""

    def __init__(self, llm: TextPrompt) -> None:
        self._llm = llm

    @staticmethod
    def build_user(cfg: ArenaConfig, pitch: str, interactions: list[dict[str, Any]]) -> str:
        rules = cfg.conversation_rules
        criteria = [c.model_dump(by_alias=True) for c in cfg.criteria]
        return "\n".join([
            "Arena globalStyle:",
            f"  - bannedPhrases: {json.dumps(cfg.banned_phrases, ensure_ascii=False)}",
            f"  - maxCommentWords: {rules.max_comment_words}",
            f"  - questionMaxSentences: {rules.question_max_sentences}",
            "",
            "Canonical criteria (source of truth):",
            json.dumps(criteria, ensure_ascii=False),
            "",
            "Founder pitch (raw):",
            pitch,
            "",
            "Session transcript excerpt (Q/A + founder answers, raw):",
            json.dumps({"interactions": interactions}, ensure_ascii=False),
            "",
            "Coach task:",
            "Return the JSON object only, matching the schema.",
        ])

    async def run(
        self,
        cfg: ArenaConfig,
        pitch: str,
        interactions: list[dict[str, Any]],
    ) -> CoachReport | None:
        """Coach report, or None when the call fails or the reply is unusable."""
        user = self.build_user(cfg, pitch, interactions)
        try:
            raw = await self._llm.text_prompt(user, COACH_SYSTEM, purpose="coach")
        except LLMProviderError as exc:
            logger.warning("Coach call failed", error=str(exc))
            return None

        report = parse_coach_report(raw)
        if report is None:
            logger.warning("Coach reply unusable", chars=len(raw or ""))
        return report

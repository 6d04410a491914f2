"""Prompt builders for panel and single-judge turns."""

from __future__ import annotations

import json
from collections.abc import Sequence

from pitch_arena.arena.models import ArenaConfig, JudgeConfig, JudgeCriterion
from pitch_arena.core.constants import PromptLimits
from pitch_arena.judging.models import JudgeIntent, JudgeMode, JudgeTurnArgs
from pitch_arena.parsing.text import compact, join_lines, truncate


ANTI_TEMPLATE_RULES = "\n".join([
    "ANTI-TEMPLATE RULES:",
    '- Do NOT over use the words "specific, exact, concrete" etc.',
    '- Do NOT start questions with: "What specific", "Outline your", "To deliver", "What steps".',
    '- Vary phrasing; prefer one of: "Walk me through…", "What would I see…", '
    '"In the demo…", "If I’m a judge watching…".',
    "- Avoid repeating the same structure used in the previous 2 questions.",
])

PANEL_OUTPUT_SHAPE = "\n".join([
    "Output ONLY valid JSON in this exact shape:",
    '{ "panel": [',
    '  { "judge": "<judgeId>", "score": 0, "comment": "", "question": "", '
    '"coverage": [{"id":"","status":"missing|partial|clear","note?":""}], '
    '"askedCriteriaId": "", "verdictHint": "pass|maybe|fail" }',
    "] }",
    "No markdown. No extra keys.",
])

JUDGE_OUTPUT_CONTRACT = "\n".join([
    "Return ONLY JSON with keys:",
    "judge, score, comment, question, coverage, askedCriteriaId, verdictHint",
    "coverage = [{id,status,note?}] where status is missing|partial|clear",
    "No markdown. No extra text.",
])


# =============================================================================
# Shared blocks
# =============================================================================


def intent_line(intent: JudgeIntent | None) -> str:
    """Chair guidance as one ``Goal | Phase | Pressure | Focus`` line."""
    if intent is None:
        return ""
    parts = compact([
        f"Goal: {intent.goal}" if intent.goal else "",
        f"Phase: {intent.phase}" if intent.phase else "",
        f"Pressure: {intent.aggressiveness}" if intent.aggressiveness else "",
        f"Focus: {', '.join(intent.primary_criteria)}" if intent.primary_criteria else "",
    ])
    return " | ".join(parts)


def criteria_block(criteria: Sequence[JudgeCriterion]) -> str:
    lines = []
    for criterion in criteria:
        signals = f" ({', '.join(criterion.signals)})" if criterion.signals else ""
        lines.append(f"- {criterion.id}: {criterion.description}{signals}")
    return "\n".join(lines)


def _objective_line(cfg: ArenaConfig) -> str:
    if cfg.objective and cfg.objective.thesis:
        return f"Objective: {cfg.objective.thesis}"
    return ""


def _safety_line(cfg: ArenaConfig) -> str:
    return f"Safety constraints: {' | '.join(cfg.safety)}" if cfg.safety else ""


def _rule_lines(cfg: ArenaConfig) -> list[str]:
    rules = cfg.conversation_rules
    banned = cfg.banned_phrases
    return [
        f"- Comment <= {rules.max_comment_words} words.",
        f"- Ask EXACTLY ONE question (<= {rules.question_max_sentences} sentence).",
        f"- Avoid: {' | '.join(banned)}" if banned else "",
    ]


def _profile_json(args: JudgeTurnArgs) -> str:
    return json.dumps(args.profile or {}, ensure_ascii=False)


# =============================================================================
# Panel
# =============================================================================


def build_panel_system(
    cfg: ArenaConfig,
    judges: Sequence[JudgeConfig],
    args: JudgeTurnArgs,
) -> str:
    """System prompt asking for one result per judge in a single reply."""
    guidance = intent_line(args.intent)

    judge_blocks = "\n\n".join(
        join_lines(
            f"JUDGE {judge.id}: {judge.label}",
            f"Tone: {judge.tone or 'direct'}",
            f"Criteria:\n{criteria_block(cfg.criteria_for(judge))}",
        )
        for judge in judges
    )

    return join_lines(
        f"You are a panel of {len(judges)} judges. Produce ONE result per judge.",
        _objective_line(cfg),
        f"Chair guidance: {guidance}" if guidance else "",
        _safety_line(cfg),
        "Rules (apply to EACH judge):",
        *_rule_lines(cfg),
        "Conversation context:",
        "- The user message may contain either:",
        "  (a) a single previous panel Q/A, OR",
        "  (b) `LastDeltaByJudge:` followed by a JSON object keyed by judgeId.",
        "- If `LastDeltaByJudge` is present, each judge MUST use ONLY their own entry (by judgeId).",
        ANTI_TEMPLATE_RULES,
        PANEL_OUTPUT_SHAPE,
        judge_blocks,
    )


def build_panel_user(args: JudgeTurnArgs) -> str:
    """Founder profile plus context, context capped for prompt size."""
    delta = truncate(args.last_delta or "", PromptLimits.PANEL_DELTA_CHARS)
    return join_lines(
        "Founder profile:",
        _profile_json(args),
        "Context:" if delta else "",
        delta,
    )


# =============================================================================
# Single judge
# =============================================================================


def _asked_recent(args: JudgeTurnArgs) -> list[str]:
    memory = args.memory
    if memory is None:
        return []
    if isinstance(memory, dict):
        asked = memory.get("asked_criteria_ids") or memory.get("askedCriteriaIds") or []
    else:
        asked = getattr(memory, "asked_criteria_ids", None) or []
    return [str(a) for a in asked]


def _round_line(args: JudgeTurnArgs) -> str:
    mode = (args.mode or JudgeMode.DISCOVERY).value
    if args.round and args.max_rounds:
        return f"Context: Round {args.round}/{args.max_rounds}. Mode: {mode}."
    if args.round:
        return f"Context: Round {args.round}. Mode: {mode}."
    return f"Mode: {mode}."


def build_judge_system(cfg: ArenaConfig, judge: JudgeConfig, args: JudgeTurnArgs) -> str:
    guidance = intent_line(args.intent)
    asked = _asked_recent(args)

    return join_lines(
        f"You are {judge.label}. Tone: {judge.tone or 'direct'}.",
        _round_line(args),
        _objective_line(cfg),
        f"Chair guidance: {guidance}" if guidance else "",
        _safety_line(cfg),
        "Rules:",
        *_rule_lines(cfg),
        ANTI_TEMPLATE_RULES,
        "Your job:",
        "- Update coverage across ALL criteria.",
        "- Ask ONE question that improves the weakest criterion (prefer not recently asked).",
        "- Score 0–10 based on clarity + credibility (not vibes).",
        "Criteria:",
        criteria_block(cfg.criteria_for(judge)),
        f"Recently asked: {', '.join(asked) if asked else '(none)'}",
        JUDGE_OUTPUT_CONTRACT,
    )


def build_judge_user(args: JudgeTurnArgs) -> str:
    delta = truncate(args.last_delta or "", PromptLimits.JUDGE_DELTA_CHARS)
    return join_lines(
        "Founder profile:",
        _profile_json(args),
        "Latest Q/A:" if delta else "",
        delta,
    )

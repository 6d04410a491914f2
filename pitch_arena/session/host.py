"""
Host Service - Warm-up interview and between-round filler questions.

The host collects the founder profile fields configured on the ``host``
judge (``profileConfig``) one question at a time, then hands over to the
panel once the model reports ``ready``. Between rounds it asks a fixed
filler question while the next panel turn is computed in the background.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pitch_arena.arena.models import ArenaConfig, JudgeConfig
from pitch_arena.core.constants import (
    HOST_FALLBACK_QUESTION,
    HOST_FILLER_QUESTIONS,
    HOST_MORE_DETAIL,
    HOST_READY_QUESTION,
    HOST_RESET_QUESTION,
)
from pitch_arena.core.exceptions import LLMProviderError
from pitch_arena.core.logging import get_logger
from pitch_arena.llm.client import TextPrompt
from pitch_arena.parsing.json_coercion import coerce_json
from pitch_arena.parsing.text import to_text


logger = get_logger(__name__)


@dataclass
class HostReply:
    """Normalized host model reply."""
    ready: bool = False
    next_question: str = HOST_FALLBACK_QUESTION
    profile: dict[str, Any] | None = None
    comment: str | None = None
    parsed: bool = True


def new_profile(fields: list[str]) -> dict[str, Any]:
    """Empty profile with every configured field set to None."""
    return {name: None for name in fields}


def merge_profiles(base: dict[str, Any] | None, incoming: Any) -> dict[str, Any]:
    """Overlay ``incoming`` on ``base``; None and empty strings never overwrite."""
    result = dict(base or {})
    if not isinstance(incoming, dict):
        return result
    for key, value in incoming.items():
        if value is not None and value != "":
            result[key] = value
    return result


def coerce_host_reply(raw: Any) -> HostReply:
    """Decode a host reply, falling back to the opening question."""
    obj = coerce_json(raw, None)
    if not isinstance(obj, dict):
        return HostReply(ready=False, next_question=HOST_FALLBACK_QUESTION, parsed=False)

    profile = obj.get("profile")
    comment = to_text(obj.get("comment"))
    return HostReply(
        ready=bool(obj.get("ready")),
        next_question=to_text(obj.get("nextQuestion")) or HOST_MORE_DETAIL,
        profile=profile if isinstance(profile, dict) else None,
        comment=comment or None,
    )


def pick_filler_question(round_number: int) -> str:
    """Filler question for a round, cycling through the fixed list."""
    index = max(0, (round_number - 1) % len(HOST_FILLER_QUESTIONS))
    return HOST_FILLER_QUESTIONS[index]


class HostService:
    """Runs host warm-up turns against the model."""

    def __init__(self, llm: TextPrompt) -> None:
        self._llm = llm

    @staticmethod
    def build_prompt(
        cfg: ArenaConfig,
        host: JudgeConfig,
        profile: dict[str, Any],
        last_question: str,
        last_answer: str,
    ) -> str:
        """Warm-up system prompt.

        Args:
            cfg: Arena config (objective and safety).
            host: The host judge (tone and profile fields).
            profile: Profile collected so far.
            last_question: Question the host asked last.
            last_answer: Founder's answer to it.

        Returns:
            Prompt text asking for the host JSON reply.
        """
        lines: list[str] = ["ROLE: You are the Host in Pitch Arena. Run a warm-up before judges."]

        if cfg.objective:
            lines.append("ARENA OBJECTIVE:")
            lines.append(f"- {cfg.objective.thesis}")
            if cfg.objective.success_definition:
                lines.append("- Success means:")
                lines.extend(f"  • {item}" for item in cfg.objective.success_definition)
            lines.append("")

        fields = host.profile_config
        schema = {
            "phase": "intro",
            "ready": False,
            "nextQuestion": "...",
            "profile": {name: "..." for name in fields},
            "comment": "...",
        }

        lines.extend([
            f"STYLE: {host.tone or 'warm'}",
        ])
        if cfg.safety:
            lines.append(
                "SAFETY: if these considerations are being challenged, steer back politely: "
                + " | ".join(cfg.safety)
            )
        lines.extend([
            "GOAL: Collect essentials (one question at a time):",
            f"- {', '.join(fields)}",
            "",
            "TASK EACH TURN:",
            "- Update profile fields if the founder answer provides them.",
            "- Ask the next single warm-up question.",
            f'- If basics are complete, set ready=true and nextQuestion MUST be exactly: "{HOST_READY_QUESTION}"',
            "",
            "HARD RULES:",
            "- Return ONLY valid JSON. No markdown. No code fences. No extra keys.",
            "- Keep comment short (<= 20 words).",
            "",
            "OUTPUT JSON SCHEMA (exact keys):",
            json.dumps(schema, ensure_ascii=False),
            "",
            "STATE:",
            "CURRENT PROFILE (may be incomplete):",
            json.dumps(profile or {}, ensure_ascii=False),
            "",
            f"LAST HOST QUESTION: {last_question}",
            f"FOUNDER ANSWER: {last_answer}",
        ])
        return "\n".join(lines)

    async def run_turn(
        self,
        cfg: ArenaConfig,
        host: JudgeConfig,
        profile: dict[str, Any],
        last_question: str,
        last_answer: str,
    ) -> tuple[HostReply, str]:
        """Run one warm-up turn.

        Returns:
            The normalized reply and the prompt that produced it. A failed
            model call yields a not-ready reply with the reset question.
        """
        prompt = self.build_prompt(cfg, host, profile, last_question, last_answer)
        try:
            raw = await self._llm.text_prompt(last_answer or "(no answer yet)", prompt, purpose="host")
        except LLMProviderError as exc:
            logger.warning("Host call failed", error=str(exc))
            return HostReply(ready=False, next_question=HOST_RESET_QUESTION, parsed=False), prompt

        reply = coerce_host_reply(raw)
        if not reply.parsed:
            logger.warning("Host reply unparseable", chars=len(raw or ""))
        return reply, prompt

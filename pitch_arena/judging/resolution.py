"""Resolution checks run while rescoring a finished round."""

from __future__ import annotations

from pitch_arena.core.logging import get_logger
from pitch_arena.judging.models import ResolutionStatus
from pitch_arena.llm.client import TextPrompt
from pitch_arena.parsing.text import to_text


logger = get_logger(__name__)


RESOLUTION_SYSTEM = "\n".join([
    "You are evaluating whether a founder answered a judge’s concern.",
    "",
    "Return ONLY one word:",
    '- "resolved" (core concern addressed clearly)',
    '- "partial" (some progress, but still gaps)',
    '- "unresolved" (did not answer the concern)',
    "",
    "Be strict but fair.",
])


def parse_resolution(reply: str | None) -> ResolutionStatus:
    """Map a one-word reply to a status; anything unclear is unresolved."""
    text = to_text(reply).lower()
    if "unresolved" in text:
        return ResolutionStatus.UNRESOLVED
    if "resolved" in text:
        return ResolutionStatus.RESOLVED
    if "partial" in text:
        return ResolutionStatus.PARTIAL
    return ResolutionStatus.UNRESOLVED


class ResolutionEvaluator:
    """Asks the model whether an answer resolved a judge's concern."""

    def __init__(self, llm: TextPrompt) -> None:
        self._llm = llm

    async def evaluate(self, issue_id: str, question: str, answer: str) -> ResolutionStatus:
        user = "\n".join([
            f"ISSUE ID: {issue_id}",
            f"QUESTION: {question}",
            f"FOUNDER ANSWER: {answer}",
        ])
        try:
            reply = await self._llm.text_prompt(user, RESOLUTION_SYSTEM, purpose="resolution")
        except Exception as exc:
            logger.warning(
                "Resolution check failed",
                issue_id=issue_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return ResolutionStatus.UNRESOLVED
        return parse_resolution(reply)

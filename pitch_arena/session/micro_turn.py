"""Detection of short founder messages that are not real answers.

A founder who types "sorry, can you repeat that?" should get the question
again rather than having it recorded as their answer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class MicroTurnKind(str, Enum):
    NONE = "none"
    REPEAT = "repeat"
    CLARIFY = "clarify"
    ACK = "ack"
    SMALLTALK = "smalltalk"


@dataclass(frozen=True)
class MicroTurn:
    """Classified founder message.

    ``prompt`` is set for kinds that stop the flow (repeat, clarify);
    ``text`` is set for kinds that add a host line and continue.
    """
    kind: MicroTurnKind
    prompt: str = ""
    text: str = ""

    @property
    def blocks_flow(self) -> bool:
        return self.kind in (MicroTurnKind.REPEAT, MicroTurnKind.CLARIFY)


# Only short messages are considered; anything longer is an answer.
MAX_MICRO_WORDS = 8

_REPEAT_PATTERNS = (
    r"\brepeat\b",
    r"\bsay (that|it) again\b",
    r"\bcome again\b",
    r"^pardon\b",
    r"\bwhat was the question\b",
    r"\bdidn'?t (catch|hear) (that|it|the question)\b",
)

_CLARIFY_PATTERNS = (
    r"\bwhat do you mean\b",
    r"\bi don'?t understand\b",
    r"\b(can|could) you (clarify|explain|rephrase)\b",
    r"\bnot sure what you mean\b",
    r"\bwhat does that mean\b",
)

_ACK_WORDS = {
    "ok", "okay", "k", "sure", "got it", "thanks", "thank you", "cool",
    "great", "alright", "all right", "noted", "understood",
}

_SMALLTALK_WORDS = {
    "hi", "hello", "hey", "hiya", "good morning", "good afternoon",
    "good evening", "how are you", "hows it going", "nice to meet you",
}

_PUNCTUATION = re.compile(r"[^\w\s']")
_WHITESPACE = re.compile(r"\s+")

REPEAT_PROMPT = "Sure, here it is again:"
CLARIFY_PROMPT = (
    "Fair ask. Answer it the way you would explain it to a smart friend: "
    "who it is for, what happens, and one real example."
)
ACK_TEXT = "Noted."
SMALLTALK_TEXT = "Hi, good to have you here. Let's keep going."


def _normalize(text: str) -> str:
    lowered = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def detect_micro_turn(text: str | None, last_question: str | None = None) -> MicroTurn:
    """Classify a founder message.

    Args:
        text: Raw founder message.
        last_question: Question currently pending, repeated for ``repeat``.

    Returns:
        MicroTurn; kind ``none`` for anything that reads as a real answer.
    """
    normalized = _normalize(text or "")
    if not normalized or len(normalized.split(" ")) > MAX_MICRO_WORDS:
        return MicroTurn(kind=MicroTurnKind.NONE)

    if any(re.search(pattern, normalized) for pattern in _REPEAT_PATTERNS):
        prompt = f"{REPEAT_PROMPT} {last_question}" if last_question else REPEAT_PROMPT
        return MicroTurn(kind=MicroTurnKind.REPEAT, prompt=prompt)

    if any(re.search(pattern, normalized) for pattern in _CLARIFY_PATTERNS):
        prompt = f"{CLARIFY_PROMPT} {last_question}" if last_question else CLARIFY_PROMPT
        return MicroTurn(kind=MicroTurnKind.CLARIFY, prompt=prompt)

    bare = normalized.replace("'", "")
    if bare in _ACK_WORDS:
        return MicroTurn(kind=MicroTurnKind.ACK, text=ACK_TEXT)
    if bare in _SMALLTALK_WORDS:
        return MicroTurn(kind=MicroTurnKind.SMALLTALK, text=SMALLTALK_TEXT)

    return MicroTurn(kind=MicroTurnKind.NONE)

"""Pitch Arena constants and fixed fallback values.

Provides centralized constants for:
- API prefix and version
- Judge fallback result text
- Host warm-up and filler questions
- Prompt size limits
"""

from enum import IntEnum


# =============================================================================
# API
# =============================================================================

API_VERSION = "v1"
API_PREFIX = f"/{API_VERSION}"


class ServicePort(IntEnum):
    """Standard local ports.

    - 8080: llm-gateway - OpenAI-compatible model gateway
    - 8090: pitch-arena - THIS SERVICE
    """
    LLM_GATEWAY = 8080
    PITCH_ARENA = 8090


# =============================================================================
# Judge Fallbacks
# =============================================================================

HOST_JUDGE_ID = "host"

FALLBACK_SCORE = 6.0
FALLBACK_COMMENT = "Quick fallback: need one sharper detail."
FALLBACK_QUESTION = "What’s one concrete end-to-end example (who, when, outcome)?"
FALLBACK_VERDICT_HINT = "maybe"

# Coverage-derived score weights (used when the model omits a positive score)
COVERAGE_SCORE_WEIGHTS: dict[str, float] = {
    "clear": 9.0,
    "partial": 6.0,
    "missing": 3.0,
}

SCORE_MIN = 0.0
SCORE_MAX = 10.0


# =============================================================================
# Prompt Limits
# =============================================================================

class PromptLimits:
    """Character and word limits applied when building prompts."""
    PANEL_DELTA_CHARS: int = 2500
    JUDGE_DELTA_CHARS: int = 900
    COVERAGE_NOTE_CHARS: int = 120
    FINGERPRINT_CHARS: int = 160
    DEFAULT_MAX_COMMENT_WORDS: int = 80
    DEFAULT_QUESTION_MAX_SENTENCES: int = 1
    JUDGE_MEMORY_ASKED: int = 6


# =============================================================================
# Host
# =============================================================================

HOST_WELCOME = "Welcome so who are you, and what are you trying to build?"
HOST_PREPARSED_WELCOME = "Thanks, we took a look at your deck."
HOST_READY_QUESTION = "Ready. Let’s begin."
HOST_FALLBACK_QUESTION = "What’s the name of your idea, and who is it for?"
HOST_RESET_QUESTION = "Quick reset: what is the name of your idea, and who is it for?"
HOST_MORE_DETAIL = "Tell me one more detail."

AWAITING_PITCH_PROMPT = "Lift doors closing. Give a 1–2 sentence pitch."
WARM_UP_COMPLETE = "Warm-up complete. Judges start now."

HOST_FILLER_QUESTIONS: tuple[str, ...] = (
    "What’s the one thing you deliberately cut from the demo?",
    "What assumption would you test first if you had a week?",
    "Which part is the most fragile technically?",
    "Who would hate this product?",
    "What surprised you while building this?",
)


# =============================================================================
# Summary
# =============================================================================

SUMMARY_UNAVAILABLE = "Summary unavailable."
SUMMARY_FALLBACK_NEXT_STEP = "Run 5 quick founder interviews on the core pain point."


__all__ = [
    "API_PREFIX",
    "API_VERSION",
    "AWAITING_PITCH_PROMPT",
    "COVERAGE_SCORE_WEIGHTS",
    "FALLBACK_COMMENT",
    "FALLBACK_QUESTION",
    "FALLBACK_SCORE",
    "FALLBACK_VERDICT_HINT",
    "HOST_FALLBACK_QUESTION",
    "HOST_FILLER_QUESTIONS",
    "HOST_JUDGE_ID",
    "HOST_MORE_DETAIL",
    "HOST_PREPARSED_WELCOME",
    "HOST_READY_QUESTION",
    "HOST_RESET_QUESTION",
    "HOST_WELCOME",
    "PromptLimits",
    "SCORE_MAX",
    "SCORE_MIN",
    "SUMMARY_FALLBACK_NEXT_STEP",
    "SUMMARY_UNAVAILABLE",
    "ServicePort",
    "WARM_UP_COMPLETE",
]

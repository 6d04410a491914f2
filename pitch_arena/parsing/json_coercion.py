"""Best-effort JSON extraction from free-text model replies.

Models are asked for "JSON only" but regularly wrap it in code fences,
prepend a sentence, or leave an unescaped quote inside a string value.
Nothing here raises on bad input: callers get ``None`` (``parse_json``) or
their own fallback (``coerce_json``).
"""

from __future__ import annotations

import json
import re
from typing import Any

from pitch_arena.core.logging import get_logger


logger = get_logger(__name__)


_LEADING_JSON_FENCE = re.compile(r"^```json\s*", re.IGNORECASE)
_LEADING_FENCE = re.compile(r"^```\s*")
_TRAILING_FENCE = re.compile(r"```[\s\r\n]*$")
_DOUBLED_QUOTE_START = re.compile(r':\s*""')


def strip_code_fences(raw: Any) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    text = str(raw if raw is not None else "").strip()
    text = _LEADING_JSON_FENCE.sub("", text, count=1)
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_json(raw: Any) -> Any | None:
    """Parse a model reply strictly (fences stripped, no repair).

    Args:
        raw: Model reply. Dicts and lists are returned unchanged.

    Returns:
        The decoded value, or None when the text is not valid JSON.
    """
    if isinstance(raw, (dict, list)):
        return raw

    try:
        return json.loads(strip_code_fences(raw))
    except ValueError:
        return None


def _extract_object_region(text: str) -> str:
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last != -1 and last > first:
        return text[first:last + 1]
    return text


def _escape_inner_quotes(text: str) -> str:
    """Escape quotes that sit inside a string and are followed by a letter or digit.

    A quote inside a string that is followed by anything else is treated as
    the closing quote. Existing backslash escapes are copied through.
    """
    out: list[str] = []
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if escaped:
            out.append(char)
            escaped = False
            continue

        if char == "\\":
            out.append(char)
            escaped = True
            continue

        if char == '"':
            if not in_string:
                in_string = True
                out.append(char)
                continue

            following = text[index + 1] if index + 1 < len(text) else ""
            if following.isascii() and following.isalnum():
                out.append('\\"')
                continue

            in_string = False
            out.append(char)
            continue

        out.append(char)

    return "".join(out)


def repair_json_text(text: str) -> str:
    """Apply the quote-repair pass to already fence-stripped text."""
    repaired = _extract_object_region(text)
    repaired = _DOUBLED_QUOTE_START.sub(': "', repaired)
    return _escape_inner_quotes(repaired)


def coerce_json(raw: Any, fallback: Any = None) -> Any:
    """Decode a model reply, repairing common breakage, or return fallback.

    Steps:
        1. Dicts and lists pass through unchanged.
        2. Strip code fences.
        3. Cut to the outermost ``{ ... }`` region when one exists.
        4. Turn ``: ""Word`` into ``: "Word``.
        5. Escape inner quotes (see ``_escape_inner_quotes``).
        6. ``json.loads``; on failure log a warning and return ``fallback``.

    Args:
        raw: Model reply (string, bytes-like text, dict, list or None).
        fallback: Value returned when decoding fails.

    Returns:
        Decoded JSON value or ``fallback``.
    """
    if isinstance(raw, (dict, list)):
        return raw

    text = repair_json_text(strip_code_fences(raw))

    try:
        return json.loads(text)
    except ValueError as exc:
        logger.warning("coerce_json failed", error=str(exc), chars=len(text))
        return fallback

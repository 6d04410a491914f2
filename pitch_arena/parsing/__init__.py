"""Parsing - JSON coercion of model replies and text helpers."""

from pitch_arena.parsing.json_coercion import (
    coerce_json,
    parse_json,
    repair_json_text,
    strip_code_fences,
)
from pitch_arena.parsing.text import compact, join_lines, to_text, truncate


__all__ = [
    "coerce_json",
    "compact",
    "join_lines",
    "parse_json",
    "repair_json_text",
    "strip_code_fences",
    "to_text",
    "truncate",
]

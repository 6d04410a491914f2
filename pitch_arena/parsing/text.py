"""Small None-safe text helpers shared by prompt builders and normalizers."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar


T = TypeVar("T")


def to_text(value: Any) -> str:
    """Trimmed string form of a value; None becomes an empty string."""
    return str(value if value is not None else "").strip()


def compact(items: Iterable[T] | None) -> list[T]:
    """Drop items whose string form is blank."""
    return [item for item in (items or []) if to_text(item)]


def join_lines(*lines: str | None) -> str:
    """Join non-empty lines with newlines.

    Empty strings are dropped too, so a blank spacer must be written as a
    line with content or built separately.
    """
    return "\n".join(line for line in lines if line)


def truncate(value: Any, limit: int) -> str:
    text = str(value if value is not None else "")
    return text if len(text) <= limit else text[:limit]

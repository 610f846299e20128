"""Shared result type and line helpers for the markdown line commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class EditResult:
    """New buffer text plus the cursor offset to restore."""

    text: str
    cursor: int

    def __post_init__(self) -> None:
        if not 0 <= self.cursor <= len(self.text):
            raise ValueError(
                f"cursor {self.cursor} outside text of length {len(self.text)}"
            )


def clamp(text: str, cursor: int) -> int:
    return max(0, min(cursor, len(text)))


def line_before_cursor(text: str, cursor: int) -> str:
    """Text between the last newline before ``cursor`` and the cursor."""

    before = text[: clamp(text, cursor)]
    return before[before.rfind("\n") + 1 :]


def line_bounds(text: str, cursor: int) -> Tuple[int, int]:
    """Start and end offsets (end exclusive, newline excluded) of the cursor line."""

    cursor = clamp(text, cursor)
    start = text.rfind("\n", 0, cursor) + 1
    end = text.find("\n", cursor)
    return start, len(text) if end == -1 else end


def insert_at(text: str, cursor: int, snippet: str) -> EditResult:
    cursor = clamp(text, cursor)
    return EditResult(text[:cursor] + snippet + text[cursor:], cursor + len(snippet))

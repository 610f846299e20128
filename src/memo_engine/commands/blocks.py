"""Tab indentation and fenced code block insertion."""

from __future__ import annotations

from memo_engine.config import TAB_SPACE_WIDTH

from .base import EditResult, clamp

CODE_FENCE = "```"


def indent(text: str, cursor: int, *, width: int = TAB_SPACE_WIDTH) -> EditResult:
    """Insert ``width`` spaces at the cursor.

    An active selection is left in the text; the cursor lands after the
    inserted run either way.
    """

    if width <= 0:
        raise ValueError("width must be positive")
    cursor = clamp(text, cursor)
    spaces = " " * width
    return EditResult(text[:cursor] + spaces + text[cursor:], cursor + width)


def insert_code_fence(text: str, cursor: int) -> EditResult:
    cursor = clamp(text, cursor)
    before, after = text[:cursor], text[cursor:]
    opening = f"{CODE_FENCE}\n"
    if before and not before.endswith("\n"):
        opening = "\n" + opening
    closing = f"\n{CODE_FENCE}"
    return EditResult(before + opening + closing + after, cursor + len(opening))


__all__ = ["CODE_FENCE", "indent", "insert_code_fence"]

"""List continuation and checkbox toggling."""

from __future__ import annotations

import re
from typing import Optional

from .base import EditResult, clamp, insert_at, line_before_cursor, line_bounds

# Priority order matters: "- [ ] " must win over its "- " prefix.
LIST_ITEM_MARKERS = ("- [ ] ", "- [x] ", "- [X] ", "* ", "- ")
CHECKBOX_MARKER = "- [ ] "

# The empty-item rule and the continuation rule are deliberately separate.
EMPTY_ORDERED_MARKER = re.compile(r"^\d+\. $")
ORDERED_MARKER = re.compile(r"^(\d+)\. ")

CHECKBOX_PREFIX = re.compile(r"^- \[( |x|X)\] ")
CONVERTIBLE_PREFIX = re.compile(r"^(?:\d+\. |- )")


def continue_list(text: str, cursor: int) -> Optional[EditResult]:
    """Handle Enter at ``cursor``.

    Returns ``None`` when Enter should fall through to a plain newline.
    """

    cursor = clamp(text, cursor)
    row = line_before_cursor(text, cursor)
    if not row:
        return None

    if row in LIST_ITEM_MARKERS or EMPTY_ORDERED_MARKER.match(row):
        start = cursor - len(row)
        return EditResult(text[:start] + text[cursor:], start)

    for marker in LIST_ITEM_MARKERS:
        if row.startswith(marker):
            return insert_at(text, cursor, f"\n{marker}")

    ordered = ORDERED_MARKER.match(row)
    if ordered:
        return insert_at(text, cursor, f"\n{int(ordered.group(1)) + 1}. ")
    return None


def toggle_checkbox(text: str, cursor: int) -> EditResult:
    """Add, convert or strip the checkbox marker of the cursor line."""

    cursor = clamp(text, cursor)
    start, end = line_bounds(text, cursor)
    line = text[start:end]

    checkbox = CHECKBOX_PREFIX.match(line)
    if checkbox:
        new_line = line[checkbox.end() :]
        shift = -len(CHECKBOX_MARKER)
    else:
        prefix = CONVERTIBLE_PREFIX.match(line)
        if prefix:
            new_line = CHECKBOX_MARKER + line[prefix.end() :]
            shift = len(CHECKBOX_MARKER) - prefix.end()
        else:
            new_line = CHECKBOX_MARKER + line
            shift = len(CHECKBOX_MARKER)

    new_text = text[:start] + new_line + text[end:]
    # The cursor never leaves its own line.
    new_cursor = max(start, min(cursor + shift, start + len(new_line)))
    return EditResult(new_text, new_cursor)


__all__ = [
    "LIST_ITEM_MARKERS",
    "EMPTY_ORDERED_MARKER",
    "ORDERED_MARKER",
    "continue_list",
    "toggle_checkbox",
]

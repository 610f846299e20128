"""Mutable editor buffer: text, cursor offset and selection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .sync import BufferMirror, Location, Selection
from .validation import clamp_offset, ensure_offset, location_from_offset

if TYPE_CHECKING:
    from memo_engine.commands import EditResult


class EditorBuffer:
    def __init__(
        self, text: str = "", *, cursor: Optional[int] = None, name: str = "memo"
    ) -> None:
        self.name = name
        self.text = text
        self.cursor = len(text) if cursor is None else ensure_offset(text, cursor)
        self.selection: Optional[Selection] = None
        self.version = 0

    @property
    def location(self) -> Location:
        return location_from_offset(self.text, self.cursor)

    @property
    def line_number(self) -> int:
        return self.location[0]

    @property
    def selected_text(self) -> str:
        if self.selection is None:
            return ""
        start, end = sorted(self.selection)
        return self.text[start:end]

    def current_line(self) -> str:
        return self.text.split("\n")[self.line_number]

    def set_cursor(self, offset: int) -> None:
        self.cursor = ensure_offset(self.text, offset)

    def set_selection(self, start: int, end: int) -> None:
        self.selection = (ensure_offset(self.text, start), ensure_offset(self.text, end))

    def clear_selection(self) -> None:
        self.selection = None

    def replace_text(self, text: str, *, cursor: Optional[int] = None) -> None:
        """Load new text (host edit or reset); the cursor is clamped."""

        self.text = text
        self.cursor = clamp_offset(text, len(text) if cursor is None else cursor)
        self.selection = None
        self.version += 1

    def apply(self, result: "EditResult") -> None:
        self.replace_text(result.text, cursor=result.cursor)

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.text,
            cursor=self.cursor,
            location=self.location,
            selection=self.selection,
            attributes=dict(attributes or {}),
        )

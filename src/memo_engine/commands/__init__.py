"""Pure markdown line commands: ``(text, cursor) -> EditResult``."""

from .base import EditResult, insert_at, line_before_cursor, line_bounds
from .blocks import CODE_FENCE, indent, insert_code_fence
from .lists import LIST_ITEM_MARKERS, continue_list, toggle_checkbox

__all__ = [
    "EditResult",
    "CODE_FENCE",
    "LIST_ITEM_MARKERS",
    "continue_list",
    "indent",
    "insert_at",
    "insert_code_fence",
    "line_before_cursor",
    "line_bounds",
    "toggle_checkbox",
]

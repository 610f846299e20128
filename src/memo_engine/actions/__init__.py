"""Editing and session verbs bound to keys and toolbar buttons."""

from .base import PASSTHROUGH, CommandResult
from .editing import (
    continue_list_item,
    indent_line,
    insert_code_block,
    toggle_checkbox_line,
)
from .session import retry_autosave, save_and_continue, save_memo

__all__ = [
    "CommandResult",
    "PASSTHROUGH",
    "continue_list_item",
    "indent_line",
    "insert_code_block",
    "toggle_checkbox_line",
    "save_memo",
    "save_and_continue",
    "retry_autosave",
]

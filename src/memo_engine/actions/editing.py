"""Actions that run the markdown line commands against the session buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

from memo_engine.commands import (
    EditResult,
    continue_list,
    indent,
    insert_code_fence,
    toggle_checkbox,
)
from memo_engine.runtime import telemetry

from .base import PASSTHROUGH, CommandResult

if TYPE_CHECKING:
    from memo_engine.keymaps import ResolutionMatch
    from memo_engine.session import MemoEditorSession


def _run(
    session: "MemoEditorSession",
    name: str,
    command: Callable[[str, int], Optional[EditResult]],
) -> Optional[EditResult]:
    buffer = session.buffer
    with telemetry.span(
        f"commands::{name}",
        logger_name="memo_engine.commands",
        component="commands",
        metadata={"cursor": buffer.cursor, "line": buffer.line_number},
    ) as handle:
        result = command(buffer.text, buffer.cursor)
        handle.add_metadata("applied", result is not None)
    if result is not None:
        session.apply_edit(result)
    return result


def continue_list_item(
    session: "MemoEditorSession", match: "ResolutionMatch | None"
) -> CommandResult:
    del match
    if _run(session, "continue_list", continue_list) is None:
        return PASSTHROUGH
    return CommandResult(consumed=True, status="list_continued")


def indent_line(
    session: "MemoEditorSession", match: "ResolutionMatch | None"
) -> CommandResult:
    del match
    width = session.settings.tab_space_width
    _run(session, "indent", lambda text, cursor: indent(text, cursor, width=width))
    return CommandResult(consumed=True, status="indented")


def toggle_checkbox_line(
    session: "MemoEditorSession", match: "ResolutionMatch | None"
) -> CommandResult:
    del match
    _run(session, "toggle_checkbox", toggle_checkbox)
    return CommandResult(consumed=True, status="checkbox_toggled")


def insert_code_block(
    session: "MemoEditorSession", match: "ResolutionMatch | None"
) -> CommandResult:
    del match
    _run(session, "code_fence", insert_code_fence)
    return CommandResult(consumed=True, status="code_block_inserted")


__all__ = [
    "continue_list_item",
    "indent_line",
    "toggle_checkbox_line",
    "insert_code_block",
]

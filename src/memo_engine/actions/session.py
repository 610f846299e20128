"""Actions that save the memo or retry a failed autosave."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import CommandResult

if TYPE_CHECKING:
    from memo_engine.keymaps import ResolutionMatch
    from memo_engine.session import MemoEditorSession


async def save_memo(
    session: "MemoEditorSession", match: "ResolutionMatch | None"
) -> CommandResult:
    del match
    return await _save(session, continue_editing=False)


async def save_and_continue(
    session: "MemoEditorSession", match: "ResolutionMatch | None"
) -> CommandResult:
    del match
    return await _save(session, continue_editing=True)


async def _save(session: "MemoEditorSession", *, continue_editing: bool) -> CommandResult:
    if not session.allow_save:
        return CommandResult(consumed=True, status="save_blocked")
    memo = await session.save(continue_editing=continue_editing)
    if memo is None:
        return CommandResult(consumed=True, status="save_failed")
    return CommandResult(consumed=True, status="saved", message=str(memo.id))


async def retry_autosave(
    session: "MemoEditorSession", match: "ResolutionMatch | None"
) -> CommandResult:
    del match
    outcome = await session.retry_autosave()
    message = str(outcome.error) if outcome.error else None
    return CommandResult(consumed=True, status=f"autosave_{outcome.status}", message=message)


__all__ = ["save_memo", "save_and_continue", "retry_autosave"]

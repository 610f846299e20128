"""Bridges key events, toolbar buttons and autosave timers to Textual hooks."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from memo_engine.actions import PASSTHROUGH, CommandResult
from memo_engine.autosave import SaveOutcome
from memo_engine.buffer import BufferMirror
from memo_engine.keymaps import KeymapRegistry, KeyStroke, load_default_keymaps
from memo_engine.session import MemoEditorSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks the adapter uses to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    notify: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


class TextualMemoAdapter:
    """Routes host input through the keymap registry into the session."""

    def __init__(
        self,
        session: MemoEditorSession,
        hooks: TextualUIHooks,
        *,
        registry: KeymapRegistry | None = None,
    ) -> None:
        self.session = session
        self.hooks = hooks
        self.registry = registry or load_default_keymaps(
            KeymapRegistry(logger_name="memo_engine.keymaps")
        )
        self._subscribe_events()
        self._refresh_buffer()
        self._refresh_status()

    async def handle_textual_key(
        self, key: str, *, modifiers: Iterable[str] = ()
    ) -> CommandResult:
        """Dispatch a key; an unconsumed result means "insert normally"."""

        stroke = KeyStroke.parse(key)
        if modifiers:
            stroke = KeyStroke(stroke.key, stroke.modifiers + tuple(modifiers))
        self._log("key ->", key=stroke.token)
        match = self.registry.resolve(stroke, context=self.session.keymap_flags())
        if match is None:
            return PASSTHROUGH
        return await self._execute(match.action.id, match)

    async def run_action(self, action_id: str) -> CommandResult:
        """Invoke an action directly (toolbar buttons)."""

        return await self._execute(action_id, None)

    async def toggle_checkbox(self) -> CommandResult:
        return await self.run_action("editor.toggle_checkbox")

    async def insert_code_block(self) -> CommandResult:
        return await self.run_action("editor.insert_code_block")

    def start_composition(self) -> None:
        self.session.state.ime_composing = True

    def end_composition(self) -> None:
        self.session.state.ime_composing = False

    def host_edit(self, text: str, cursor: Optional[int] = None) -> None:
        """Mirror an edit the widget already applied (typing, paste)."""

        if text == self.session.buffer.text:
            if cursor is not None:
                self.session.buffer.set_cursor(cursor)
            return
        self.session.set_content(text, cursor=cursor)
        self._refresh_status()

    async def process_timers(self) -> Optional[SaveOutcome]:
        """Forward the host timer tick to the autosave scheduler."""

        outcome = await self.session.scheduler.process_timers()
        if outcome is not None:
            self._log("autosave <-", status=outcome.status)
        self._refresh_status()
        return outcome

    async def _execute(self, action_id: str, match) -> CommandResult:
        action = self.registry.get_action(action_id)
        outcome = action(self.session, match)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        result = outcome if isinstance(outcome, CommandResult) else CommandResult(True)
        self._log("result <-", action=action_id, status=result.status)
        if result.consumed:
            self._refresh_buffer()
        self._refresh_status()
        return result

    def _subscribe_events(self) -> None:
        bus = self.session.bus
        for event in (
            "session.opened",
            "session.saved",
            "session.save_failed",
            "session.notify",
            "autosave.saved",
            "autosave.error",
        ):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log("event ->", event=name)
        self.hooks.handle_event(name, payload)
        if name == "session.notify":
            self.hooks.notify(str(payload))
        elif name == "autosave.error":
            self.hooks.notify(f"Auto save failed: {payload}")
        if name in {"session.opened", "session.saved"}:
            self._refresh_buffer()

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.session.buffer.mirror())

    def _refresh_status(self) -> None:
        scheduler = self.session.scheduler
        if scheduler.last_error is not None:
            self.hooks.update_status("Auto save error (retry available)")
            return
        self.hooks.update_status(self.session.autosave_label() or "")

    def _log(self, prefix: str, **fields: object) -> None:
        buffer = self.session.buffer
        snapshot: Dict[str, object] = {
            "cursor": buffer.cursor,
            "version": buffer.version,
            "ticks": self.session.scheduler.pending_ticks,
            "saving": self.session.scheduler.is_saving,
        }
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        self.hooks.log(" ".join([prefix, *(f"{k}={v!r}" for k, v in snapshot.items())]))


__all__ = ["TextualMemoAdapter", "TextualUIHooks"]

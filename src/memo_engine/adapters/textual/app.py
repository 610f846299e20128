"""Executable Textual app hosting the memo editor core."""

from __future__ import annotations

import argparse
import os
from dataclasses import replace
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when the demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal
    from textual.widgets import Button, Footer, Header, Static, TextArea
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use memo_engine.adapters.textual.app"
    ) from exc

from memo_engine.buffer import BufferMirror, location_from_offset, offset_from_location
from memo_engine.config import EditorSettings
from memo_engine.draft import Memo
from memo_engine.runtime import telemetry
from memo_engine.session import InMemoryMemoStore, MemoEditorSession

from .controller import TextualMemoAdapter, TextualUIHooks

INTERCEPTED_KEYS = {"enter", "tab", "ctrl+enter"}

TOOLBAR_ACTIONS = {
    "checkbox": "editor.toggle_checkbox",
    "code": "editor.insert_code_block",
    "save": "session.save",
    "save-continue": "session.save_and_continue",
    "retry": "session.retry_autosave",
}


class MemoTextArea(TextArea):
    """TextArea that offers Enter/Tab to the adapter before inserting."""

    adapter: TextualMemoAdapter | None = None

    async def _on_key(self, event: events.Key) -> None:
        if self.adapter is not None and event.key in INTERCEPTED_KEYS:
            self.adapter.host_edit(self.text, cursor=self.cursor_offset)
            result = await self.adapter.handle_textual_key(event.key)
            if result.consumed:
                event.stop()
                event.prevent_default()
                return
        await super()._on_key(event)

    @property
    def cursor_offset(self) -> int:
        return offset_from_location(self.text, self.cursor_location)

    def show(self, mirror: BufferMirror) -> None:
        if mirror.text != self.text:
            self.load_text(mirror.text)
        self.cursor_location = location_from_offset(mirror.text, mirror.cursor)


class MemoEditorApp(App[None]):
    """Minimal Textual UI embedding the memo editor session."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#editor {
		height: 1fr;
		border: round $accent;
	}

	#toolbar {
		height: 3;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+s", "save", "Save"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        settings: EditorSettings,
        memo_id: Optional[int] = None,
        cache_key: str = "demo",
    ) -> None:
        super().__init__()
        seed = [Memo(id=memo_id, content="- [ ] try the editor")] if memo_id else []
        self.store = InMemoryMemoStore(seed, max_upload_bytes=5 * 1024 * 1024)
        self.session = MemoEditorSession(
            self.store, memo_id=memo_id, cache_key=cache_key, settings=settings
        )
        self.adapter: TextualMemoAdapter | None = None
        self._editor: MemoTextArea | None = None
        self._status: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        self._editor = MemoTextArea("", id="editor", tab_behavior="indent")
        yield self._editor
        with Horizontal(id="toolbar"):
            yield Button("Checkbox", id="checkbox")
            yield Button("Code", id="code")
            yield Button("Save", id="save", variant="success")
            if self.session.settings.continue_editing:
                yield Button("Save & continue", id="save-continue")
            yield Button("Retry autosave", id="retry", variant="warning")
        self._status = Static("", id="status-line")
        yield self._status
        yield Footer()

    async def on_mount(self) -> None:
        await self.session.open()
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            notify=lambda message: self.notify(message, severity="error"),
        )
        self.adapter = TextualMemoAdapter(self.session, hooks)
        if self._editor is not None:
            self._editor.adapter = self.adapter
            self._editor.focus()
        interval = min(0.1, self.session.settings.tick_seconds)
        self.set_interval(interval, self._process_timers)

    async def _process_timers(self) -> None:
        if self.adapter:
            await self.adapter.process_timers()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if self.adapter and self._editor is not None:
            self.adapter.host_edit(self._editor.text, cursor=self._editor.cursor_offset)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        action_id = TOOLBAR_ACTIONS.get(event.button.id or "")
        if self.adapter is None or action_id is None:
            return
        if self._editor is not None:
            self.adapter.host_edit(self._editor.text, cursor=self._editor.cursor_offset)
        await self.adapter.run_action(action_id)

    async def action_save(self) -> None:
        if self.adapter:
            await self.adapter.run_action("session.save")

    def _update_buffer(self, mirror: BufferMirror) -> None:
        if self._editor is not None:
            self._editor.show(mirror)

    def _update_status(self, status: str) -> None:
        if self._status is not None:
            self._status.update(status)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the memo editor Textual demo.")
    parser.add_argument(
        "--memo-id",
        type=int,
        default=None,
        help="Edit a seeded memo with this id instead of creating a new one",
    )
    parser.add_argument(
        "--cache-key",
        default=os.environ.get("MEMO_ENGINE_CACHE_KEY", "demo"),
        help="Key suffix for the draft content cache (default: demo)",
    )
    parser.add_argument(
        "--no-autosave", action="store_true", help="Disable autosave"
    )
    parser.add_argument(
        "--continue-editing",
        action="store_true",
        help="Show the 'save and continue' button",
    )
    parser.add_argument(
        "--log-preset",
        choices=telemetry.PRESETS,
        default=None,
        help="telelog preset (default: MEMO_ENGINE_LOG_* environment)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    settings = EditorSettings.from_env()
    if args.no_autosave:
        settings = replace(settings, autosave_enabled=False)
    if args.continue_editing:
        settings = replace(settings, continue_editing=True)
    app = MemoEditorApp(settings=settings, memo_id=args.memo_id, cache_key=args.cache_key)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()

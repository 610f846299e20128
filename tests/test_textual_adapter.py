from __future__ import annotations

import asyncio
from typing import List, Optional

from memo_engine.adapters.textual import TextualMemoAdapter, TextualUIHooks
from memo_engine.config import EditorSettings
from memo_engine.draft import Draft, Memo, MemoId, SaveError
from memo_engine.session import InMemoryMemoStore, MemoEditorSession


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RejectingStore(InMemoryMemoStore):
    def __init__(self, *args: object, failures: int = 1, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.failures = failures

    async def patch_memo(self, memo_id: MemoId, draft: Draft) -> Memo:
        if self.failures:
            self.failures -= 1
            raise SaveError("server said no", snapshot=draft)
        return await super().patch_memo(memo_id, draft)


class Recorder:
    def __init__(self) -> None:
        self.buffers: List[str] = []
        self.statuses: List[str] = []
        self.notices: List[str] = []
        self.events: List[str] = []
        self.logs: List[str] = []

    def hooks(self) -> TextualUIHooks:
        return TextualUIHooks(
            update_buffer=lambda mirror: self.buffers.append(mirror.text),
            update_status=self.statuses.append,
            notify=self.notices.append,
            handle_event=lambda name, _payload: self.events.append(name),
            log=self.logs.append,
        )


def make_adapter(
    store: Optional[InMemoryMemoStore] = None,
    *,
    memo_id: Optional[int] = None,
    clock: Optional[FakeClock] = None,
) -> tuple[TextualMemoAdapter, Recorder]:
    session = MemoEditorSession(
        store or InMemoryMemoStore(),
        memo_id=memo_id,
        cache_key="adapter",
        settings=EditorSettings(),
        clock=clock or FakeClock(),
    )
    recorder = Recorder()
    return TextualMemoAdapter(session, recorder.hooks()), recorder


def test_enter_continues_list_and_refreshes_widget() -> None:
    adapter, recorder = make_adapter()
    adapter.host_edit("- milk", cursor=6)

    result = asyncio.run(adapter.handle_textual_key("enter"))

    assert result.consumed is True
    assert result.status == "list_continued"
    assert adapter.session.buffer.text == "- milk\n- "
    assert recorder.buffers[-1] == "- milk\n- "


def test_enter_on_plain_line_passes_through() -> None:
    adapter, recorder = make_adapter()
    adapter.host_edit("plain", cursor=5)
    before = len(recorder.buffers)

    result = asyncio.run(adapter.handle_textual_key("enter"))

    assert result.consumed is False
    assert adapter.session.buffer.text == "plain"
    assert len(recorder.buffers) == before


def test_enter_during_composition_is_left_to_widget() -> None:
    adapter, _ = make_adapter()
    adapter.host_edit("- item", cursor=6)
    adapter.start_composition()

    result = asyncio.run(adapter.handle_textual_key("enter"))

    assert result.consumed is False
    assert adapter.session.buffer.text == "- item"

    adapter.end_composition()
    assert asyncio.run(adapter.handle_textual_key("enter")).consumed is True


def test_tab_inserts_spaces() -> None:
    adapter, _ = make_adapter()
    adapter.host_edit("ab", cursor=1)

    result = asyncio.run(adapter.handle_textual_key("tab"))

    assert result.status == "indented"
    assert adapter.session.buffer.text == "a  b"
    assert adapter.session.buffer.cursor == 3


def test_toolbar_actions_edit_current_line() -> None:
    adapter, recorder = make_adapter()
    adapter.host_edit("buy milk", cursor=3)

    asyncio.run(adapter.toggle_checkbox())
    assert adapter.session.buffer.text == "- [ ] buy milk"

    adapter.host_edit("", cursor=0)
    asyncio.run(adapter.insert_code_block())
    assert recorder.buffers[-1] == "```\n\n```"


def test_ctrl_enter_saves_and_clears_editor() -> None:
    store = InMemoryMemoStore()
    adapter, recorder = make_adapter(store)

    blocked = asyncio.run(adapter.handle_textual_key("enter", modifiers=("ctrl",)))
    assert blocked.status == "save_blocked"

    adapter.host_edit("remember #this")
    result = asyncio.run(adapter.handle_textual_key("ctrl+enter"))

    assert result.status == "saved"
    assert [memo.content for memo in store.memos.values()] == ["remember #this"]
    assert recorder.buffers[-1] == ""
    assert "session.saved" in recorder.events


def test_autosave_failure_is_surfaced_and_retry_recovers() -> None:
    store = RejectingStore([Memo(id=5, content="old")])
    clock = FakeClock()
    adapter, recorder = make_adapter(store, memo_id=5, clock=clock)

    async def scenario() -> None:
        await adapter.session.open()
        adapter.host_edit("new content")
        assert recorder.statuses[-1] == "Auto-save pending.."

        clock.now += 6
        outcome = await adapter.process_timers()
        assert outcome is not None and outcome.status == "failed"
        assert recorder.statuses[-1] == "Auto save error (retry available)"
        assert recorder.notices == ["Auto save failed: server said no"]

        retried = await adapter.run_action("session.retry_autosave")
        assert retried.status == "autosave_saved"

    asyncio.run(scenario())

    assert store.memos[5].content == "new content"
    assert recorder.statuses[-1] == ""


def test_adapter_emits_log_lines() -> None:
    adapter, recorder = make_adapter()

    asyncio.run(adapter.handle_textual_key("tab"))

    assert any(line.startswith("key ->") for line in recorder.logs)
    assert any(line.startswith("result <-") for line in recorder.logs)

from __future__ import annotations

import asyncio
from typing import List, Optional

from memo_engine.config import EditorSettings
from memo_engine.draft import (
    BlobFile,
    Draft,
    Memo,
    MemoId,
    MemoRelation,
    SaveError,
    Visibility,
)
from memo_engine.session import (
    InMemoryMemoStore,
    MemoEditorSession,
    Role,
    UserProfile,
    extract_tags,
)


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FlakyStore(InMemoryMemoStore):
    """Rejects the first ``failures`` patches."""

    def __init__(self, *args: object, failures: int = 1, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.failures = failures

    async def patch_memo(self, memo_id: MemoId, draft: Draft) -> Memo:
        if self.failures:
            self.failures -= 1
            self.patch_calls.append((memo_id, draft))
            raise SaveError("backend unavailable", snapshot=draft)
        return await super().patch_memo(memo_id, draft)


def make_session(
    store: InMemoryMemoStore,
    *,
    memo_id: Optional[int] = None,
    settings: Optional[EditorSettings] = None,
    clock: Optional[FakeClock] = None,
    **kwargs: object,
) -> MemoEditorSession:
    return MemoEditorSession(
        store,
        memo_id=memo_id,
        cache_key="test",
        settings=settings or EditorSettings(),
        clock=clock or FakeClock(),
        **kwargs,  # type: ignore[arg-type]
    )


def record(session: MemoEditorSession, event: str) -> List[object]:
    seen: List[object] = []
    session.bus.subscribe(event, seen.append)
    return seen


def test_extract_tags_keeps_first_occurrence_order() -> None:
    assert extract_tags("#b plain #a text #b end#not") == ["b", "a"]


def test_create_flow_saves_and_upserts_tags() -> None:
    store = InMemoryMemoStore()
    confirmed: List[bool] = []
    session = make_session(store, on_confirm=lambda: confirmed.append(True))
    saved_events = record(session, "session.saved")

    session.set_content("idea for #work and #home")
    assert session.cache == {"memo-editor-test": "idea for #work and #home"}
    assert session.scheduler.has_pending is False

    memo = asyncio.run(session.save())

    assert memo is not None
    assert store.memos[memo.id].content == "idea for #work and #home"
    assert store.tags == ["work", "home"]
    assert session.buffer.text == ""
    assert session.cache == {}
    assert confirmed == [True]
    assert saved_events == [{"memo": memo, "continue_editing": False}]


def test_save_and_continue_marks_new_memo_as_editing() -> None:
    store = InMemoryMemoStore()
    session = make_session(store)
    session.set_content("draft")

    memo = asyncio.run(session.save(continue_editing=True))

    assert memo is not None
    assert store.editing == memo.id


def test_editing_autosaves_after_quiet_window() -> None:
    store = InMemoryMemoStore([Memo(id=7, content="old")])
    clock = FakeClock()
    session = make_session(store, memo_id=7, clock=clock)
    autosaved = record(session, "autosave.saved")

    async def scenario() -> None:
        await session.open()
        assert session.buffer.text == "old"
        session.set_content("old and #new")
        clock.advance(5)
        assert await session.scheduler.process_timers() is None
        clock.advance(1)
        outcome = await session.scheduler.process_timers()
        assert outcome is not None and outcome.status == "saved"

    asyncio.run(scenario())

    assert store.memos[7].content == "old and #new"
    assert len(store.patch_calls) == 1
    assert store.tags == ["new"]
    assert len(autosaved) == 1
    assert session.state.is_requesting is False


def test_cached_content_wins_over_stored_memo() -> None:
    store = InMemoryMemoStore(
        [Memo(id=3, content="stored", visibility=Visibility.PROTECTED)]
    )
    session = MemoEditorSession(
        store,
        memo_id=3,
        cache_key="test",
        cache={"memo-editor-test": "cached text"},
        settings=EditorSettings(),
    )

    asyncio.run(session.open())

    assert session.buffer.text == "cached text"
    assert session.state.visibility is Visibility.PROTECTED


def test_clearing_content_removes_cache_entry() -> None:
    session = make_session(InMemoryMemoStore())

    session.set_content("x")
    session.set_content("")

    assert "memo-editor-test" not in session.cache
    assert session.state.has_content is False


def test_manual_save_supersedes_scheduled_autosave() -> None:
    store = InMemoryMemoStore([Memo(id=7, content="old")])
    clock = FakeClock()
    session = make_session(store, memo_id=7, clock=clock)

    async def scenario() -> None:
        await session.open()
        session.set_content("changed")
        clock.advance(3)
        assert await session.save() is not None
        clock.advance(10)
        assert await session.scheduler.process_timers() is None

    asyncio.run(scenario())

    assert len(store.patch_calls) == 1
    assert store.memos[7].content == "changed"


def test_upload_links_resources_and_reports_failures() -> None:
    store = InMemoryMemoStore([Memo(id=7, content="old")], max_upload_bytes=4)
    session = make_session(store, memo_id=7)
    notices = record(session, "session.notify")

    async def scenario() -> None:
        await session.open()
        return await session.upload_files(
            [BlobFile("a.png", b"123", "image/png"), BlobFile("big.bin", b"123456")]
        )

    uploaded = asyncio.run(scenario())

    assert [resource.filename for resource in uploaded] == ["a.png"]
    assert store.resources[uploaded[0].id].memo_id == 7
    assert session.state.resources == uploaded
    assert session.state.is_uploading is False
    assert len(notices) == 1 and "big.bin" in str(notices[0])


def test_add_relations_dedupes_and_drops_self_reference() -> None:
    session = make_session(InMemoryMemoStore([Memo(id=7)]), memo_id=7)

    session.add_relations([3, 7, 3])
    session.add_relations([4])

    assert session.state.relations == [
        MemoRelation(memo_id=7, related_memo_id=4),
        MemoRelation(memo_id=7, related_memo_id=3),
    ]
    assert session.reference_relations == session.state.relations


def test_visibility_options_respect_public_memo_policy() -> None:
    settings = EditorSettings(disable_public_memos=True)
    user = UserProfile(role=Role.USER, memo_visibility=Visibility.PUBLIC)
    session = make_session(InMemoryMemoStore(), settings=settings, user=user)

    assert session.state.visibility is Visibility.PRIVATE
    assert dict(session.visibility_options())[Visibility.PUBLIC] is True

    admin = make_session(
        InMemoryMemoStore(), settings=settings, user=UserProfile(role=Role.ADMIN)
    )
    assert dict(admin.visibility_options())[Visibility.PUBLIC] is False


def test_insert_tag_at_cursor() -> None:
    session = make_session(InMemoryMemoStore())
    session.set_content("note  end", cursor=5)

    session.insert_tag("idea")

    assert session.buffer.text == "note #idea  end"
    assert session.buffer.cursor == 11


def test_allow_save_requires_payload_and_idle_session() -> None:
    session = make_session(InMemoryMemoStore())
    assert session.allow_save is False

    session.set_content("x")
    assert session.allow_save is True

    session.state.is_uploading = True
    assert session.allow_save is False


def test_autosave_label_tracks_pending_ticks() -> None:
    store = InMemoryMemoStore([Memo(id=7, content="old")])
    clock = FakeClock()
    session = make_session(store, memo_id=7, clock=clock)
    assert session.autosave_label() is None

    session.set_content("new")
    assert session.autosave_label() == "Auto-save pending.."

    clock.advance(2)
    asyncio.run(session.scheduler.process_timers())
    assert session.autosave_label() == "Auto-save pending...."

    disabled = make_session(
        store, memo_id=7, settings=EditorSettings(autosave_enabled=False)
    )
    disabled.set_content("new")
    assert disabled.autosave_label() is None


def test_failed_autosave_can_be_retried() -> None:
    store = FlakyStore([Memo(id=7, content="old")])
    clock = FakeClock()
    session = make_session(store, memo_id=7, clock=clock)
    errors = record(session, "autosave.error")

    async def scenario() -> None:
        await session.open()
        session.set_content("new")
        clock.advance(6)
        failed = await session.scheduler.process_timers()
        assert failed is not None and failed.status == "failed"
        assert session.keymap_flags()["autosave_error"] is True
        assert session.autosave_label() is None

        retried = await session.retry_autosave()
        assert retried.status == "saved"

    asyncio.run(scenario())

    assert len(errors) == 1 and isinstance(errors[0], SaveError)
    assert session.scheduler.last_error is None
    assert store.memos[7].content == "new"
    assert session.state.is_requesting is False


def test_failed_manual_save_keeps_draft() -> None:
    store = FlakyStore([Memo(id=7, content="old")])
    session = make_session(store, memo_id=7)
    failures = record(session, "session.save_failed")

    async def scenario() -> Optional[Memo]:
        await session.open()
        session.set_content("keep me")
        return await session.save()

    assert asyncio.run(scenario()) is None
    assert len(failures) == 1
    assert session.buffer.text == "keep me"
    assert session.cache["memo-editor-test"] == "keep me"
    assert session.state.is_requesting is False


def test_autosave_after_upload_carries_new_resource() -> None:
    store = InMemoryMemoStore([Memo(id=7, content="old")])
    clock = FakeClock()
    session = make_session(store, memo_id=7, clock=clock)

    async def scenario() -> None:
        await session.open()
        session.set_content("new")
        uploaded = await session.upload_files([BlobFile("a.png", b"png", "image/png")])
        clock.advance(6)
        outcome = await session.scheduler.process_timers()
        assert outcome is not None and outcome.status == "saved"
        assert uploaded[0].id in store.patch_calls[-1][1].resource_ids

    asyncio.run(scenario())

    assert len(store.patch_calls) == 1
    assert store.memos[7].resource_ids == (1,)


def test_save_of_deleted_memo_fails_and_keeps_draft() -> None:
    store = InMemoryMemoStore([Memo(id=7, content="old")])
    confirmed: List[bool] = []
    session = make_session(store, memo_id=7, on_confirm=lambda: confirmed.append(True))
    notices = record(session, "session.notify")

    async def scenario() -> Optional[Memo]:
        await session.open()
        session.set_content("orphaned edit")
        store.delete_memo(7)
        return await session.save()

    assert asyncio.run(scenario()) is None
    assert notices == ["Memo 7 not found"]
    assert confirmed == []
    assert session.buffer.text == "orphaned edit"
    assert asyncio.run(session.open()) is None

"""Editor session: owns the draft, the buffer and the autosave scheduler."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, MutableMapping, Optional, Sequence

from memo_engine.autosave import AutosaveScheduler, SaveOutcome
from memo_engine.buffer import EditorBuffer
from memo_engine.commands import EditResult, insert_at
from memo_engine.config import UNKNOWN_ID, EditorSettings
from memo_engine.draft import (
    BlobFile,
    Draft,
    Memo,
    MemoId,
    MemoRelation,
    Resource,
    SaveError,
    UploadError,
    Visibility,
    unique_relations,
)
from memo_engine.runtime import telemetry

from .events import EventBus
from .store import MemoStore
from .tags import extract_tags

TagExtractor = Callable[[str], Sequence[str]]


class Role(str, Enum):
    HOST = "HOST"
    ADMIN = "ADMIN"
    USER = "USER"


@dataclass(slots=True)
class UserProfile:
    role: Role = Role.USER
    memo_visibility: Visibility = Visibility.PRIVATE

    @property
    def is_admin(self) -> bool:
        return self.role in (Role.HOST, Role.ADMIN)


@dataclass(slots=True)
class SessionState:
    visibility: Visibility = Visibility.PRIVATE
    resources: List[Resource] = field(default_factory=list)
    relations: List[MemoRelation] = field(default_factory=list)
    is_uploading: bool = False
    is_requesting: bool = False
    has_content: bool = False
    ime_composing: bool = False


class MemoEditorSession:
    """Glue between host widgets, the line commands and the store.

    The scheduler reads the draft through :meth:`current_draft` and the
    baseline through the store cache; every mutation goes through this
    session.
    """

    def __init__(
        self,
        store: MemoStore,
        *,
        memo_id: Optional[MemoId] = None,
        cache_key: str = "",
        cache: Optional[MutableMapping[str, str]] = None,
        user: Optional[UserProfile] = None,
        settings: Optional[EditorSettings] = None,
        relations: Iterable[MemoRelation] = (),
        tag_extractor: TagExtractor = extract_tags,
        on_confirm: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.memo_id = memo_id
        self.settings = settings or EditorSettings.from_env()
        self.user = user or UserProfile()
        self.cache: MutableMapping[str, str] = {} if cache is None else cache
        self.cache_key = f"memo-editor-{cache_key}"
        self.tag_extractor = tag_extractor
        self.on_confirm = on_confirm
        self.bus = EventBus()

        self.state = SessionState(relations=list(relations))
        self.state.visibility = self._initial_visibility()
        self.buffer = EditorBuffer(self.cache.get(self.cache_key, ""))
        self.state.has_content = self.buffer.text != ""

        self.scheduler = AutosaveScheduler(
            get_baseline=self.baseline,
            get_current=self.current_draft,
            commit=self._autosave_commit,
            settings=self.settings,
            clock=clock,
            on_saved=lambda memo: self.bus.emit("autosave.saved", memo),
            on_error=lambda error: self.bus.emit("autosave.error", error),
        )

    @property
    def editing(self) -> bool:
        return self.memo_id is not None and self.memo_id != UNKNOWN_ID

    def baseline(self) -> Optional[Memo]:
        if not self.editing:
            return None
        assert self.memo_id is not None
        return self.store.cached_memo(self.memo_id)

    def current_draft(self, baseline: Optional[Memo] = None) -> Draft:
        del baseline  # the draft never depends on the baseline
        return Draft(
            content=self.buffer.text,
            visibility=self.state.visibility,
            resource_ids=tuple(resource.id for resource in self.state.resources),
            relations=tuple(self.state.relations),
        )

    @property
    def reference_relations(self) -> List[MemoRelation]:
        relations = [r for r in self.state.relations if r.type == "REFERENCE"]
        if not self.editing:
            return relations
        return [
            r
            for r in relations
            if r.memo_id == self.memo_id and r.related_memo_id != self.memo_id
        ]

    @property
    def allow_save(self) -> bool:
        has_payload = self.state.has_content or bool(self.state.resources)
        return has_payload and not self.state.is_uploading and not self.state.is_requesting

    def keymap_flags(self) -> dict[str, bool]:
        return {
            "ime_composing": self.state.ime_composing,
            "editing": self.editing,
            "autosave_error": self.scheduler.last_error is not None,
        }

    async def open(self) -> Optional[Memo]:
        """Load the edited memo; cached content wins over the stored one."""

        if not self.editing:
            return None
        assert self.memo_id is not None
        memo = await self.store.get_memo(self.memo_id)
        if memo is None:
            return None
        self.state.visibility = memo.visibility
        self.state.resources = await self.store.list_resources(memo.resource_ids)
        self.state.relations = list(memo.relations)
        if not self.cache.get(self.cache_key):
            self.buffer.replace_text(memo.content)
            self.state.has_content = memo.content != ""
        self.bus.emit("session.opened", memo)
        return memo

    def set_content(self, text: str, *, cursor: Optional[int] = None) -> None:
        """Accept an edit made by the host widget."""

        self.buffer.replace_text(text, cursor=cursor)
        self._content_changed()

    def apply_edit(self, result: EditResult) -> None:
        self.buffer.apply(result)
        self._content_changed()

    def _content_changed(self) -> None:
        text = self.buffer.text
        self.state.has_content = text != ""
        if text:
            self.cache[self.cache_key] = text
            self.scheduler.request_save()
        else:
            self.cache.pop(self.cache_key, None)
        self.bus.emit("session.content", text)

    def _initial_visibility(self) -> Visibility:
        visibility = self.user.memo_visibility
        if self.settings.disable_public_memos and visibility is Visibility.PUBLIC:
            return Visibility.PRIVATE
        return visibility

    def visibility_options(self) -> List[tuple[Visibility, bool]]:
        """``(visibility, disabled)`` pairs for the selector."""

        return [
            (
                option,
                option is Visibility.PUBLIC
                and not self.user.is_admin
                and self.settings.disable_public_memos,
            )
            for option in Visibility
        ]

    def set_visibility(self, visibility: Visibility) -> None:
        self.state.visibility = visibility
        self.scheduler.request_save()

    def set_resources(self, resources: Iterable[Resource]) -> None:
        self.state.resources = list(resources)
        self.scheduler.request_save()

    def set_relations(self, relations: Iterable[MemoRelation]) -> None:
        self.state.relations = list(relations)
        self.scheduler.request_save()

    def add_relations(self, related_ids: Iterable[MemoId]) -> None:
        own_id = self.memo_id if self.editing else UNKNOWN_ID
        assert own_id is not None
        added = [
            MemoRelation(memo_id=own_id, related_memo_id=related, type="REFERENCE")
            for related in related_ids
        ]
        merged = [
            r for r in added + self.state.relations if r.related_memo_id != own_id
        ]
        self.set_relations(unique_relations(merged))

    def insert_tag(self, name: str) -> None:
        self.apply_edit(insert_at(self.buffer.text, self.buffer.cursor, f"#{name} "))

    async def upload_files(self, files: Iterable[BlobFile]) -> List[Resource]:
        """Upload sequentially; the resource list grows once all have resolved."""

        uploaded: List[Resource] = []
        for file in files:
            resource = await self._upload(file)
            if resource is None:
                continue
            if self.editing:
                assert self.memo_id is not None
                resource = await self.store.update_resource(
                    resource.id, memo_id=self.memo_id
                )
            uploaded.append(resource)
        if uploaded:
            self.state.resources = self.state.resources + uploaded
            self.scheduler.request_save()
        return uploaded

    async def _upload(self, file: BlobFile) -> Optional[Resource]:
        self.state.is_uploading = True
        resource: Optional[Resource] = None
        try:
            resource = await self.store.create_resource_with_blob(file)
        except UploadError as exc:
            telemetry.record_event(
                "upload.failed",
                level="warning",
                data={"filename": exc.filename or file.name, "reason": str(exc)},
                logger_name="memo_engine.session",
            )
            self.bus.emit("session.notify", str(exc))
        finally:
            self.state.is_uploading = False
        self.scheduler.request_save()
        return resource

    async def save(self, *, continue_editing: bool = False) -> Optional[Memo]:
        """Explicit save; cancels any scheduled autosave first."""

        if self.state.is_requesting:
            return None
        self.scheduler.flush()
        self.state.is_requesting = True
        draft = self.current_draft()
        saved: Optional[Memo] = None
        with telemetry.span(
            "session::save",
            logger_name="memo_engine.session",
            component="session",
            metadata={"memo_id": self.memo_id, "create": not self.editing},
        ) as handle:
            try:
                if self.editing:
                    assert self.memo_id is not None
                    previous = await self.store.get_memo(self.memo_id)
                    if previous is None:
                        raise SaveError(f"Memo {self.memo_id} not found", snapshot=draft)
                    saved = await self.store.patch_memo(previous.id, draft)
                else:
                    saved = await self.store.create_memo(
                        draft, mark_editing=continue_editing
                    )
            except SaveError as exc:
                handle.fail(str(exc))
                self.bus.emit("session.notify", str(exc))
                self.bus.emit("session.save_failed", exc)
                return None
            finally:
                self.state.is_requesting = False

        self.buffer.replace_text("")
        self.cache.pop(self.cache_key, None)
        self.state.has_content = False
        await self._upsert_tags(draft.content)
        self.state.resources = []
        self.bus.emit(
            "session.saved", {"memo": saved, "continue_editing": continue_editing}
        )
        if self.on_confirm is not None:
            self.on_confirm()
        return saved

    async def retry_autosave(self) -> SaveOutcome:
        return await self.scheduler.retry()

    async def _autosave_commit(self, draft: Draft, baseline: Memo) -> Memo:
        self.state.is_requesting = True
        try:
            saved = await self.store.patch_memo(baseline.id, draft)
            await self._upsert_tags(draft.content)
        finally:
            self.state.is_requesting = False
        return saved

    async def _upsert_tags(self, content: str) -> None:
        for name in dict.fromkeys(self.tag_extractor(content)):
            await self.store.upsert_tag(name)

    def autosave_label(self) -> Optional[str]:
        scheduler = self.scheduler
        if not scheduler.enabled or scheduler.last_error is not None:
            return None
        ticks = scheduler.pending_ticks
        if scheduler.is_saving:
            return "Auto-saving" + "." * (ticks + 1)
        if ticks:
            return "Auto-save pending" + "." * (ticks + 1)
        return None


__all__ = ["MemoEditorSession", "SessionState", "UserProfile", "Role"]

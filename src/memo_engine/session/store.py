"""Store capability consumed by the session, plus an in-memory implementation."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from memo_engine.draft import (
    BlobFile,
    Draft,
    Memo,
    MemoId,
    Resource,
    ResourceId,
    RowStatus,
    SaveError,
    UploadError,
)


class MemoStore(Protocol):
    """Remote CRUD surface for memos, tags and resources."""

    def cached_memo(self, memo_id: MemoId) -> Optional[Memo]:
        """Return the locally cached copy without hitting the backend."""
        ...

    async def get_memo(self, memo_id: MemoId) -> Optional[Memo]: ...

    async def create_memo(self, draft: Draft, *, mark_editing: bool = False) -> Memo: ...

    async def patch_memo(self, memo_id: MemoId, draft: Draft) -> Memo: ...

    async def upsert_tag(self, name: str) -> None: ...

    async def list_resources(self, ids: Sequence[ResourceId]) -> List[Resource]: ...

    async def create_resource_with_blob(self, file: BlobFile) -> Resource: ...

    async def update_resource(self, resource_id: ResourceId, *, memo_id: MemoId) -> Resource: ...


class InMemoryMemoStore:
    """Dictionary-backed store with the same caching rules as the web client."""

    def __init__(
        self,
        memos: Iterable[Memo] = (),
        *,
        max_upload_bytes: Optional[int] = None,
    ) -> None:
        self.memos: Dict[MemoId, Memo] = {}
        self.tags: List[str] = []
        self.resources: Dict[ResourceId, Resource] = {}
        self.editing: Optional[MemoId] = None
        self.max_upload_bytes = max_upload_bytes
        self.patch_calls: List[tuple[MemoId, Draft]] = []
        self._next_memo_id = 1
        self._next_resource_id = 1
        self.upsert_memos(memos)

    def upsert_memos(self, memos: Iterable[Memo]) -> None:
        for memo in memos:
            self.memos[memo.id] = memo
            self._next_memo_id = max(self._next_memo_id, memo.id + 1)

    def delete_memo(self, memo_id: MemoId) -> None:
        self.memos.pop(memo_id, None)

    def mark_editing(self, memo_id: Optional[MemoId]) -> None:
        self.editing = memo_id

    def cached_memo(self, memo_id: MemoId) -> Optional[Memo]:
        return self.memos.get(memo_id)

    async def get_memo(self, memo_id: MemoId) -> Optional[Memo]:
        return self.memos.get(memo_id)

    async def create_memo(self, draft: Draft, *, mark_editing: bool = False) -> Memo:
        memo = Memo(id=self._next_memo_id).merged(draft)
        self._next_memo_id += 1
        self.memos[memo.id] = memo
        if mark_editing:
            self.mark_editing(memo.id)
        return memo

    async def patch_memo(self, memo_id: MemoId, draft: Draft) -> Memo:
        self.patch_calls.append((memo_id, draft))
        current = self.memos.get(memo_id)
        if current is None:
            raise SaveError(f"Memo {memo_id} not found", snapshot=draft)
        patched = current.merged(draft)
        if patched.row_status is RowStatus.NORMAL:
            self.memos[memo_id] = patched
        else:
            self.memos.pop(memo_id, None)
        return patched

    async def upsert_tag(self, name: str) -> None:
        if name not in self.tags:
            self.tags.append(name)

    async def list_resources(self, ids: Sequence[ResourceId]) -> List[Resource]:
        return [self.resources[rid] for rid in ids if rid in self.resources]

    async def create_resource_with_blob(self, file: BlobFile) -> Resource:
        if self.max_upload_bytes is not None and len(file.data) > self.max_upload_bytes:
            raise UploadError(
                f"{file.name} exceeds {self.max_upload_bytes} bytes", filename=file.name
            )
        resource = Resource(
            id=self._next_resource_id,
            filename=file.name,
            type=file.type,
            size=len(file.data),
        )
        self._next_resource_id += 1
        self.resources[resource.id] = resource
        return resource

    async def update_resource(self, resource_id: ResourceId, *, memo_id: MemoId) -> Resource:
        try:
            current = self.resources[resource_id]
        except KeyError as exc:
            raise KeyError(f"Resource '{resource_id}' is not registered") from exc
        updated = replace(current, memo_id=memo_id)
        self.resources[resource_id] = updated
        return updated


__all__ = ["MemoStore", "InMemoryMemoStore"]

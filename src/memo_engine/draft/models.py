"""Memo, draft and resource value types."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Tuple

MemoId = int
ResourceId = int


class Visibility(str, Enum):
    PRIVATE = "PRIVATE"
    PROTECTED = "PROTECTED"
    PUBLIC = "PUBLIC"


class RowStatus(str, Enum):
    NORMAL = "NORMAL"
    ARCHIVED = "ARCHIVED"


@dataclass(frozen=True, slots=True)
class MemoRelation:
    memo_id: MemoId
    related_memo_id: MemoId
    type: str = "REFERENCE"


@dataclass(frozen=True, slots=True)
class Resource:
    id: ResourceId
    filename: str
    type: str = ""
    size: int = 0
    memo_id: Optional[MemoId] = None


@dataclass(frozen=True, slots=True)
class BlobFile:
    """File handed to the host upload capability (drop or paste)."""

    name: str
    data: bytes
    type: str = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class Draft:
    """Editable memo state owned by a single editor session."""

    content: str = ""
    visibility: Visibility = Visibility.PRIVATE
    resource_ids: Tuple[ResourceId, ...] = ()
    relations: Tuple[MemoRelation, ...] = ()

    def with_content(self, content: str) -> "Draft":
        return replace(self, content=content)


@dataclass(frozen=True, slots=True)
class Memo:
    """Persisted memo; used as the baseline for change detection."""

    id: MemoId
    content: str = ""
    visibility: Visibility = Visibility.PRIVATE
    resource_ids: Tuple[ResourceId, ...] = ()
    relations: Tuple[MemoRelation, ...] = ()
    row_status: RowStatus = RowStatus.NORMAL

    def to_draft(self) -> Draft:
        return Draft(
            content=self.content,
            visibility=self.visibility,
            resource_ids=self.resource_ids,
            relations=self.relations,
        )

    def merged(self, draft: Draft) -> "Memo":
        return replace(
            self,
            content=draft.content,
            visibility=draft.visibility,
            resource_ids=tuple(draft.resource_ids),
            relations=tuple(draft.relations),
        )


@dataclass(frozen=True, slots=True)
class SaveAttempt:
    value: Draft
    started_at: float = field(default_factory=time.monotonic)


def content_changed(current: Draft, baseline: Memo) -> bool:
    """Default change check: surrounding whitespace is not a change."""

    return current.content.strip() != baseline.content.strip()


def unique_relations(relations: Iterable[MemoRelation]) -> Tuple[MemoRelation, ...]:
    """Keep the first relation for each related memo id, preserving order."""

    seen: set[MemoId] = set()
    result: list[MemoRelation] = []
    for relation in relations:
        if relation.related_memo_id in seen:
            continue
        seen.add(relation.related_memo_id)
        result.append(relation)
    return tuple(result)


__all__ = [
    "MemoId",
    "ResourceId",
    "Visibility",
    "RowStatus",
    "MemoRelation",
    "Resource",
    "BlobFile",
    "Draft",
    "Memo",
    "SaveAttempt",
    "content_changed",
    "unique_relations",
]

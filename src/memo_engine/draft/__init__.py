"""Draft, baseline and resource data model."""

from .errors import SaveError, UploadError
from .models import (
    BlobFile,
    Draft,
    Memo,
    MemoId,
    MemoRelation,
    Resource,
    ResourceId,
    RowStatus,
    SaveAttempt,
    Visibility,
    content_changed,
    unique_relations,
)

__all__ = [
    "BlobFile",
    "Draft",
    "Memo",
    "MemoId",
    "MemoRelation",
    "Resource",
    "ResourceId",
    "RowStatus",
    "SaveAttempt",
    "Visibility",
    "SaveError",
    "UploadError",
    "content_changed",
    "unique_relations",
]

"""Recoverable failures raised by host capabilities."""

from __future__ import annotations

from typing import Optional

from .models import Draft


class SaveError(RuntimeError):
    """Commit rejected by the store or lost in transport."""

    def __init__(self, message: str, *, snapshot: Optional[Draft] = None) -> None:
        super().__init__(message)
        self.snapshot = snapshot

    @classmethod
    def wrap(cls, exc: BaseException, *, snapshot: Optional[Draft] = None) -> "SaveError":
        if isinstance(exc, SaveError):
            if exc.snapshot is None:
                exc.snapshot = snapshot
            return exc
        wrapped = cls(str(exc) or type(exc).__name__, snapshot=snapshot)
        wrapped.__cause__ = exc
        return wrapped


class UploadError(RuntimeError):
    """Attachment upload failed; never affects autosave state."""

    def __init__(self, message: str, *, filename: Optional[str] = None) -> None:
        super().__init__(message)
        self.filename = filename

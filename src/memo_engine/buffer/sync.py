"""Boundary types exchanged with host text widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

Location = Tuple[int, int]  # (row, column)
Selection = Tuple[int, int]  # (start offset, end offset)


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot of the editor buffer."""

    text: str
    cursor: int
    location: Location
    selection: Optional[Selection] = None
    attributes: dict[str, str] = field(default_factory=dict)


class BufferValidationError(RuntimeError):
    """Raised when a host reports a cursor outside the text."""

    def __init__(self, message: str, *, cursor: int | Location | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor

"""Editor buffer state and host synchronization types."""

from .state import EditorBuffer
from .sync import BufferMirror, BufferValidationError, Location, Selection
from .validation import (
    clamp_offset,
    ensure_offset,
    location_from_offset,
    offset_from_location,
)

__all__ = [
    "EditorBuffer",
    "BufferMirror",
    "BufferValidationError",
    "Location",
    "Selection",
    "clamp_offset",
    "ensure_offset",
    "location_from_offset",
    "offset_from_location",
]

"""Offset validation and (row, column) conversion helpers."""

from __future__ import annotations

from .sync import BufferValidationError, Location


def clamp_offset(text: str, offset: int) -> int:
    return max(0, min(offset, len(text)))


def ensure_offset(text: str, offset: int) -> int:
    if offset < 0 or offset > len(text):
        raise BufferValidationError("Cursor offset out of range", cursor=offset)
    return offset


def location_from_offset(text: str, offset: int) -> Location:
    offset = clamp_offset(text, offset)
    before = text[:offset]
    row = before.count("\n")
    return (row, offset - (before.rfind("\n") + 1))


def offset_from_location(text: str, location: Location) -> int:
    row, col = location
    lines = text.split("\n")
    if row < 0 or row >= len(lines):
        raise BufferValidationError("Row out of range", cursor=location)
    if col < 0 or col > len(lines[row]):
        raise BufferValidationError("Column out of range", cursor=location)
    return sum(len(line) + 1 for line in lines[:row]) + col

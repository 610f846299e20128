"""Result type shared by every action handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a key or toolbar action.

    ``consumed=False`` tells the host to run its default key behaviour.
    """

    consumed: bool
    status: str = "ok"
    message: Optional[str] = None


PASSTHROUGH = CommandResult(consumed=False, status="passthrough")

"""Debounced autosave scheduling."""

from .scheduler import AutosaveScheduler, AutosaveStatus, SaveOutcome
from .timer import TimerState

__all__ = [
    "AutosaveScheduler",
    "AutosaveStatus",
    "SaveOutcome",
    "TimerState",
]

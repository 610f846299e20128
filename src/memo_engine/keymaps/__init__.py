"""Key bindings for the memo editor."""

from .models import ActionRef, Binding, KeyStroke, WhenClause
from .registry import (
    KeymapConflictError,
    KeymapRegistry,
    RegistryStats,
    ResolutionMatch,
)
from .defaults import load_default_keymaps

__all__ = [
    "ActionRef",
    "Binding",
    "KeyStroke",
    "WhenClause",
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
    "ResolutionMatch",
    "load_default_keymaps",
]

"""Editor session wiring, store capability and event bus."""

from .editor import MemoEditorSession, Role, SessionState, UserProfile
from .events import EventBus
from .store import InMemoryMemoStore, MemoStore
from .tags import extract_tags

__all__ = [
    "MemoEditorSession",
    "SessionState",
    "UserProfile",
    "Role",
    "EventBus",
    "MemoStore",
    "InMemoryMemoStore",
    "extract_tags",
]

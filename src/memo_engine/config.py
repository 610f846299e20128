"""Editor settings resolved from ``MEMO_ENGINE_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "MEMO_ENGINE_"

TAB_SPACE_WIDTH = 2
AUTOSAVE_DEBOUNCE_MS = 6000
AUTOSAVE_TICK_MS = 1000
UNKNOWN_ID = -1


def _env_int(env: Mapping[str, str], key: str, fallback: int) -> int:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        parsed = int(value)
    except ValueError:
        return fallback
    return parsed if parsed > 0 else fallback


def _env_flag(env: Mapping[str, str], key: str, fallback: bool) -> bool:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class EditorSettings:
    """Knobs shared by the scheduler, the line commands and the session."""

    autosave_enabled: bool = True
    autosave_debounce_ms: int = AUTOSAVE_DEBOUNCE_MS
    autosave_tick_ms: int = AUTOSAVE_TICK_MS
    tab_space_width: int = TAB_SPACE_WIDTH
    continue_editing: bool = False
    disable_public_memos: bool = False

    def __post_init__(self) -> None:
        if self.autosave_debounce_ms <= 0:
            raise ValueError("autosave_debounce_ms must be positive")
        if self.autosave_tick_ms <= 0:
            raise ValueError("autosave_tick_ms must be positive")
        if self.tab_space_width <= 0:
            raise ValueError("tab_space_width must be positive")

    @property
    def debounce_seconds(self) -> float:
        return self.autosave_debounce_ms / 1000.0

    @property
    def tick_seconds(self) -> float:
        return self.autosave_tick_ms / 1000.0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EditorSettings":
        source = os.environ if env is None else env
        return cls(
            autosave_enabled=_env_flag(source, "AUTOSAVE", True),
            autosave_debounce_ms=_env_int(
                source, "AUTOSAVE_DEBOUNCE_MS", AUTOSAVE_DEBOUNCE_MS
            ),
            autosave_tick_ms=_env_int(source, "AUTOSAVE_TICK_MS", AUTOSAVE_TICK_MS),
            tab_space_width=_env_int(source, "TAB_SPACE_WIDTH", TAB_SPACE_WIDTH),
            continue_editing=_env_flag(source, "CONTINUE_EDITING", False),
            disable_public_memos=_env_flag(source, "DISABLE_PUBLIC_MEMOS", False),
        )


__all__ = [
    "EditorSettings",
    "TAB_SPACE_WIDTH",
    "AUTOSAVE_DEBOUNCE_MS",
    "AUTOSAVE_TICK_MS",
    "UNKNOWN_ID",
]

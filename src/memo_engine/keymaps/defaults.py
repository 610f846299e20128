"""Built-in editor bindings and toolbar actions."""

from __future__ import annotations

from typing import Iterable

from memo_engine.actions import editing as editing_actions
from memo_engine.actions import session as session_actions

from .models import ActionRef, Binding, KeyStroke
from .registry import KeymapRegistry

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id="editor.continue_list",
        handler=editing_actions.continue_list_item,
        description="Continue or end the markdown list on Enter",
    ),
    ActionRef(
        id="editor.indent",
        handler=editing_actions.indent_line,
        description="Insert spaces instead of a tab character",
    ),
    ActionRef(
        id="editor.toggle_checkbox",
        handler=editing_actions.toggle_checkbox_line,
        description="Toggle a todo checkbox on the current line",
    ),
    ActionRef(
        id="editor.insert_code_block",
        handler=editing_actions.insert_code_block,
        description="Insert a fenced code block at the cursor",
    ),
    ActionRef(
        id="session.save",
        handler=session_actions.save_memo,
        description="Save the memo",
    ),
    ActionRef(
        id="session.save_and_continue",
        handler=session_actions.save_and_continue,
        description="Save the memo and keep creating",
    ),
    ActionRef(
        id="session.retry_autosave",
        handler=session_actions.retry_autosave,
        description="Retry the failed autosave",
    ),
)

DEFAULT_BINDINGS: tuple[Binding, ...] = (
    Binding(
        id="editor.enter",
        stroke=KeyStroke("enter"),
        action_id="editor.continue_list",
        when=("!ime_composing",),
    ),
    Binding(id="editor.tab", stroke=KeyStroke("tab"), action_id="editor.indent"),
    Binding(
        id="session.ctrl_enter",
        stroke=KeyStroke("enter", ("ctrl",)),
        action_id="session.save",
    ),
    Binding(
        id="session.meta_enter",
        stroke=KeyStroke("enter", ("meta",)),
        action_id="session.save",
    ),
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    actions: Iterable[ActionRef] = DEFAULT_ACTIONS,
    bindings: Iterable[Binding] = DEFAULT_BINDINGS,
) -> KeymapRegistry:
    for action in actions:
        registry.register_action(action, replace=True)
    for binding in bindings:
        registry.register_binding(binding, replace=True)
    return registry


__all__ = ["DEFAULT_ACTIONS", "DEFAULT_BINDINGS", "load_default_keymaps"]

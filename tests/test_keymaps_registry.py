import pytest

from memo_engine.keymaps import (
    ActionRef,
    Binding,
    KeymapConflictError,
    KeymapRegistry,
    KeyStroke,
    WhenClause,
    load_default_keymaps,
)


def make_action(action_id: str = "editor.test") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_binding(
    *,
    binding_id: str,
    stroke: str = "enter",
    action_id: str = "editor.test",
    when: tuple[str, ...] = (),
    priority: int = 0,
) -> Binding:
    return Binding(
        id=binding_id,
        stroke=KeyStroke.parse(stroke),
        action_id=action_id,
        when=when,  # type: ignore[arg-type]
        priority=priority,
    )


def test_keystroke_normalizes_modifiers() -> None:
    stroke = KeyStroke.parse("Control+Shift+Enter")

    assert stroke == KeyStroke("enter", ("shift", "ctrl"))
    assert stroke.token == "ctrl+shift+enter"
    assert KeyStroke.parse("cmd+enter").token == "meta+enter"


def test_when_clause_parses_negation() -> None:
    clause = WhenClause.parse("!ime_composing")

    assert clause == WhenClause("ime_composing", False)
    assert clause.evaluate({}) is True
    assert clause.evaluate({"ime_composing": True}) is False
    with pytest.raises(ValueError):
        WhenClause.parse("  ")


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="editor.enter")

    registry.register_binding(binding)

    assert registry.stats().binding_count == 1
    assert list(registry.iter_bindings("enter")) == [binding]


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="editor.enter"))

    with pytest.raises(KeymapConflictError) as excinfo:
        registry.register_binding(make_binding(binding_id="editor.enter.duplicate"))

    assert [b.id for b in excinfo.value.conflicts] == ["editor.enter"]


def test_opposite_conditions_do_not_conflict() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(
        make_binding(binding_id="enter.composing", when=("ime_composing",))
    )

    registry.register_binding(
        make_binding(binding_id="enter.typing", when=("!ime_composing",))
    )

    assert registry.stats().binding_count == 2


def test_replace_drops_conflicting_binding() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="first"))

    registry.register_binding(make_binding(binding_id="second"), replace=True)

    assert [b.id for b in registry.iter_bindings("enter")] == ["second"]


def test_register_binding_requires_known_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_binding(binding_id="orphan"))


def test_duplicate_action_requires_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    with pytest.raises(ValueError):
        registry.register_action(make_action())
    registry.register_action(make_action(), replace=True)


def test_resolve_prefers_priority_and_checks_conditions() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action("low"))
    registry.register_action(make_action("high"))
    registry.register_binding(make_binding(binding_id="low", action_id="low"))
    registry.register_binding(
        make_binding(
            binding_id="high", action_id="high", when=("editing",), priority=5
        )
    )

    assert registry.resolve("enter", context={"editing": True}).action.id == "high"
    assert registry.resolve("enter").action.id == "low"
    assert registry.resolve("tab") is None


def test_unregister_binding_clears_token_index() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    registry.register_binding(make_binding(binding_id="editor.enter"))

    removed = registry.unregister_binding("editor.enter")

    assert removed is not None
    assert registry.stats().tokens == ()
    assert registry.unregister_binding("editor.enter") is None


def test_default_keymaps_guard_enter_during_composition() -> None:
    registry = load_default_keymaps(KeymapRegistry())

    typing = registry.resolve("enter", context={"ime_composing": False})
    assert typing is not None and typing.action.id == "editor.continue_list"
    assert registry.resolve("enter", context={"ime_composing": True}) is None
    assert registry.resolve("tab").action.id == "editor.indent"
    assert registry.resolve("ctrl+enter").action.id == "session.save"
    assert registry.resolve("meta+enter").action.id == "session.save"

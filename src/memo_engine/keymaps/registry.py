"""Keymap registry: actions, bindings, conflict detection and resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Mapping, Optional

from memo_engine.runtime.telemetry import span

from .models import ActionRef, Binding, KeyStroke


@dataclass(slots=True)
class RegistryStats:
    action_count: int
    binding_count: int
    tokens: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    """Resolved binding paired with its action."""

    binding: Binding
    action: ActionRef


class KeymapConflictError(RuntimeError):
    """Raised when a new binding shadows an existing one in the same context."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        conflicts_tuple = tuple(conflicts)
        super().__init__(
            f"Binding '{binding.id}' conflicts with {[b.id for b in conflicts_tuple]}"
        )
        self.binding = binding
        self.conflicts = conflicts_tuple


class KeymapRegistry:
    """Owns action references and the bindings indexed by key token."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._by_token: Dict[str, set[str]] = {}
        self._logger_name = logger_name

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        if not replace and action.id in self._actions:
            raise ValueError(f"Action '{action.id}' already registered")
        self._actions[action.id] = action
        return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "key": binding.stroke.token},
        ) as handle:
            if binding.action_id not in self._actions:
                handle.add_metadata("missing_action", binding.action_id)
                raise KeyError(
                    f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
                )

            conflicts = [c for c in self.detect_conflicts(binding) if c.id != binding.id]
            if conflicts and not replace:
                handle.add_metadata("conflicts", ",".join(c.id for c in conflicts))
                raise KeymapConflictError(binding, conflicts)
            if binding.id in self._bindings and not replace:
                raise ValueError(f"Binding id '{binding.id}' already registered")

            for stale in conflicts:
                self.unregister_binding(stale.id)
            self.unregister_binding(binding.id)
            self._bindings[binding.id] = binding
            self._by_token.setdefault(binding.stroke.token, set()).add(binding.id)
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        binding = self._bindings.pop(binding_id, None)
        if binding is None:
            return None
        bucket = self._by_token.get(binding.stroke.token)
        if bucket is not None:
            bucket.discard(binding_id)
            if not bucket:
                self._by_token.pop(binding.stroke.token, None)
        return binding

    def iter_bindings(self, token: Optional[str] = None) -> Iterator[Binding]:
        if token is None:
            yield from self._bindings.values()
            return
        for binding_id in sorted(self._by_token.get(token, ())):
            yield self._bindings[binding_id]

    def detect_conflicts(self, binding: Binding) -> list[Binding]:
        return [
            existing
            for existing in self.iter_bindings(binding.stroke.token)
            if _contexts_overlap(binding, existing)
        ]

    def resolve(
        self, key: str | KeyStroke, *, context: Optional[Mapping[str, bool]] = None
    ) -> Optional[ResolutionMatch]:
        """Highest-priority binding for ``key`` whose conditions hold."""

        stroke = key if isinstance(key, KeyStroke) else KeyStroke.parse(key)
        ctx = context or {}
        candidates = [
            binding
            for binding in self.iter_bindings(stroke.token)
            if binding.allows(ctx)
        ]
        if not candidates:
            return None
        candidates.sort(key=lambda b: (-b.priority, b.id))
        best = candidates[0]
        return ResolutionMatch(binding=best, action=self.get_action(best.action_id))

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            tokens=tuple(sorted(self._by_token)),
        )


def _contexts_overlap(left: Binding, right: Binding) -> bool:
    """Same-priority bindings overlap unless a shared flag expects opposite values."""

    right_map = right.when_map
    for flag, expected in left.when_map.items():
        if flag in right_map and right_map[flag] != expected:
            return False
    return left.priority == right.priority


__all__ = [
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
    "ResolutionMatch",
]

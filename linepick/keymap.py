"""Key name to action dispatch table."""

from __future__ import annotations

from dataclasses import dataclass

from . import actions
from .actions import ACTION_PREFIX, Action
from .config import Config
from .context import Context
from .errors import ConfigError

DEFAULT_BINDINGS: dict[str, str] = {
    "Esc": "Cancel",
    "C-c": "Cancel",
    "Enter": "Finish",
    "C-f": "ForwardChar",
    "Right": "ForwardChar",
    "C-b": "BackwardChar",
    "Left": "BackwardChar",
    "C-a": "BeginningOfLine",
    "Home": "BeginningOfLine",
    "C-e": "EndOfLine",
    "End": "EndOfLine",
    "BS": "DeleteBackwardChar",
    "C-d": "DeleteForwardChar",
    "Delete": "DeleteForwardChar",
    "C-w": "DeleteBackwardWord",
    "C-k": "KillEndOfLine",
    "C-u": "KillBeginningOfLine",
    "C-n": "SelectDown",
    "Down": "SelectDown",
    "C-p": "SelectUp",
    "Up": "SelectUp",
    "Pgdn": "SelectNextPage",
    "Pgup": "SelectPreviousPage",
    "C-Space": "ToggleSelectionAndSelectNext",
    "C-r": "RotateFilter",
    "C-t": "ToggleQuery",
    "C-v": "ToggleRangeMode",
    "C-g": "CancelRangeMode",
    "C-l": "RefreshScreen",
}


@dataclass(frozen=True)
class KeyBinding:
    key: str
    action_name: str
    handler: Action


def is_printable_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class Keymap:
    """Resolves key names to actions; unbound printable keys edit the query."""

    def __init__(self, config: Config | None = None) -> None:
        self._actions: dict[str, Action] = dict(actions.ACTIONS)
        self._bindings: dict[str, KeyBinding] = {}
        for key, name in DEFAULT_BINDINGS.items():
            self.bind(key, ACTION_PREFIX + name)
        if config is not None:
            self.apply_config(config)

    def define(self, name: str, steps: list[str]) -> None:
        """Register a combined action that runs ``steps`` in order."""
        resolved: list[Action] = []
        for step in steps:
            handler = self._actions.get(step)
            if handler is None:
                raise ConfigError(f"action {name!r} refers to unknown action {step!r}")
            resolved.append(handler)
        self._actions[name] = actions.combine(resolved)

    def bind(self, key: str, action_name: str) -> None:
        handler = self._actions.get(action_name)
        if handler is None:
            raise ConfigError(f"unknown action {action_name!r} for key {key!r}")
        self._bindings[key] = KeyBinding(key, action_name, handler)

    def unbind(self, key: str) -> None:
        self._bindings.pop(key, None)

    def apply_config(self, config: Config) -> None:
        for name, steps in config.action.items():
            self.define(name, steps)
        for key, action_name in config.keymap.items():
            # "-" unbinds, so the key falls through to query input.
            if action_name == "-":
                self.unbind(key)
            else:
                self.bind(key, action_name)

    def lookup(self, key: str) -> KeyBinding | None:
        return self._bindings.get(key)

    def dispatch(self, ctx: Context, key: str) -> bool:
        """Run the action bound to ``key``; returns False when nothing handled it."""
        binding = self._bindings.get(key)
        if binding is not None:
            binding.handler(ctx)
            return True
        if is_printable_key(key):
            actions.insert_text(ctx, key)
            return True
        return False


__all__ = ["DEFAULT_BINDINGS", "KeyBinding", "Keymap", "is_printable_key"]

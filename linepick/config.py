"""rc-file settings.

The rc file is a JSON object stored under the platform config directory,
with ``~/.linepick/config.json`` still honoured as a legacy location. A
missing default file means defaults; an explicitly requested file that is
missing or malformed raises ``ConfigError`` so startup aborts before the
terminal is touched.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from .errors import ConfigError
from .filters.external import DEFAULT_BUFFER_THRESHOLD
from .filters.regexp import IGNORE_CASE

APP_NAME = "linepick"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LEGACY_CONFIG_PATH = Path.home() / f".{APP_NAME}" / CONFIG_FILENAME

LAYOUT_TOP_DOWN = "top-down"
LAYOUT_BOTTOM_UP = "bottom-up"
LAYOUT_TYPES = (LAYOUT_TOP_DOWN, LAYOUT_BOTTOM_UP)

DEFAULT_PROMPT = "QUERY>"
DEFAULT_QUERY_EXECUTION_DELAY_MS = 50


@dataclass(frozen=True)
class CustomFilterConfig:
    cmd: str
    args: tuple[str, ...] = ()
    buffer_threshold: int = DEFAULT_BUFFER_THRESHOLD


@dataclass
class Config:
    keymap: dict[str, str] = field(default_factory=dict)
    action: dict[str, list[str]] = field(default_factory=dict)
    initial_filter: str = IGNORE_CASE
    prompt: str = DEFAULT_PROMPT
    layout: str = LAYOUT_TOP_DOWN
    query_execution_delay: int = DEFAULT_QUERY_EXECUTION_DELAY_MS
    custom_filters: dict[str, CustomFilterConfig] = field(default_factory=dict)
    theme: str = ""

    @property
    def query_execution_delay_seconds(self) -> float:
        return self.query_execution_delay / 1000.0


def is_valid_layout(name: str) -> bool:
    return name in LAYOUT_TYPES


def locate_rcfile() -> Path | None:
    """Return the first existing rc file among the known locations."""
    for candidate in (DEFAULT_CONFIG_PATH, LEGACY_CONFIG_PATH):
        if candidate.is_file():
            return candidate
    return None


def _expect(value: Any, kind: type, key: str) -> Any:
    if isinstance(value, bool) and kind is int:
        raise ConfigError(f"config key {key!r} must be an integer")
    if not isinstance(value, kind):
        raise ConfigError(f"config key {key!r} has the wrong type")
    return value


def _string_map(value: object, key: str) -> dict[str, str]:
    data = _expect(value, dict, key)
    out: dict[str, str] = {}
    for name, target in data.items():
        out[str(name)] = str(_expect(target, str, f"{key}.{name}"))
    return out


def _parse_actions(value: object) -> dict[str, list[str]]:
    data = _expect(value, dict, "Action")
    out: dict[str, list[str]] = {}
    for name, steps in data.items():
        steps = _expect(steps, list, f"Action.{name}")
        out[str(name)] = [str(_expect(step, str, f"Action.{name}")) for step in steps]
    return out


def _parse_custom_filters(value: object) -> dict[str, CustomFilterConfig]:
    data = _expect(value, dict, "CustomFilter")
    out: dict[str, CustomFilterConfig] = {}
    for name, spec in data.items():
        spec = _expect(spec, dict, f"CustomFilter.{name}")
        cmd = spec.get("Cmd")
        if not isinstance(cmd, str) or not cmd:
            raise ConfigError(f"custom filter {name!r} needs a Cmd")
        args = _expect(spec.get("Args", []), list, f"CustomFilter.{name}.Args")
        threshold = _expect(
            spec.get("BufferThreshold", DEFAULT_BUFFER_THRESHOLD),
            int,
            f"CustomFilter.{name}.BufferThreshold",
        )
        out[str(name)] = CustomFilterConfig(
            cmd=cmd,
            args=tuple(str(arg) for arg in args),
            buffer_threshold=threshold if threshold > 0 else DEFAULT_BUFFER_THRESHOLD,
        )
    return out


def parse_config(data: object) -> Config:
    """Build a ``Config`` from a decoded JSON document."""
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object")

    config = Config()
    if "Keymap" in data:
        config.keymap = _string_map(data["Keymap"], "Keymap")
    if "Action" in data:
        config.action = _parse_actions(data["Action"])
    initial = data.get("InitialFilter", data.get("InitialMatcher"))
    if initial is not None:
        config.initial_filter = str(_expect(initial, str, "InitialFilter"))
    if "Prompt" in data:
        config.prompt = str(_expect(data["Prompt"], str, "Prompt"))
    if "Layout" in data:
        layout = str(_expect(data["Layout"], str, "Layout"))
        if not is_valid_layout(layout):
            raise ConfigError(f"unknown layout: {layout!r}")
        config.layout = layout
    if "QueryExecutionDelay" in data:
        delay = _expect(data["QueryExecutionDelay"], int, "QueryExecutionDelay")
        config.query_execution_delay = delay
    if "Theme" in data:
        config.theme = str(_expect(data["Theme"], str, "Theme"))
    if "CustomFilter" in data:
        config.custom_filters = _parse_custom_filters(data["CustomFilter"])
    return config


def read_config(path: Path) -> Config:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"malformed config {path}: {exc}") from exc
    return parse_config(data)


def load_config(path: Path | None = None) -> Config:
    """Load ``path`` or the located default rc file; defaults when none exists."""
    if path is not None:
        return read_config(path)
    located = locate_rcfile()
    if located is None:
        return Config()
    return read_config(located)


__all__ = [
    "APP_NAME",
    "Config",
    "CustomFilterConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_PROMPT",
    "DEFAULT_QUERY_EXECUTION_DELAY_MS",
    "LAYOUT_BOTTOM_UP",
    "LAYOUT_TOP_DOWN",
    "LAYOUT_TYPES",
    "LEGACY_CONFIG_PATH",
    "is_valid_layout",
    "load_config",
    "locate_rcfile",
    "parse_config",
    "read_config",
]

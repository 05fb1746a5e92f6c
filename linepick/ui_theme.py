"""ANSI palette used by the renderer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic SGR sequences; empty strings mean terminal defaults."""

    name: str
    basic: str
    match: str
    cursor: str
    selected: str
    prompt: str
    query: str
    caret: str
    filter_name: str
    status: str


DEFAULT_THEME = UITheme(
    name="default",
    basic="",
    match="\033[1;38;5;81m",
    cursor="\033[7m",
    selected="\033[48;5;24m",
    prompt="\033[1m",
    query="",
    caret="\033[7m",
    filter_name="\033[2;38;5;250m",
    status="\033[38;5;214m",
)

MONO_THEME = UITheme(
    name="mono",
    basic="",
    match="\033[4m",
    cursor="\033[7m",
    selected="\033[1m",
    prompt="",
    query="",
    caret="\033[7m",
    filter_name="",
    status="",
)

THEMES: dict[str, UITheme] = {theme.name: theme for theme in (DEFAULT_THEME, MONO_THEME)}


def available_theme_names() -> list[str]:
    return sorted(THEMES)


def resolve_theme(name: str | None) -> UITheme:
    """Return the named theme, falling back to the default for unknown names."""
    if not name:
        return DEFAULT_THEME
    return THEMES.get(name.strip().lower(), DEFAULT_THEME)


__all__ = ["DEFAULT_THEME", "MONO_THEME", "THEMES", "UITheme", "available_theme_names", "resolve_theme"]

"""Immutable line values.

``RawLine`` is one ingested record; ``MatchedLine`` wraps a raw line with the
character ranges that matched the current query. Selection identity is the
raw line's ordinal ``index``, never object identity.
"""

from __future__ import annotations

from dataclasses import dataclass

NULL_SEPARATOR = "\0"


@dataclass(frozen=True)
class RawLine:
    index: int
    text: str
    enable_sep: bool = False

    @property
    def id(self) -> int:
        return self.index

    def display_text(self) -> str:
        """Return the part shown on screen (text before NUL when enabled)."""
        if self.enable_sep:
            head, sep, _tail = self.text.partition(NULL_SEPARATOR)
            if sep:
                return head
        return self.text

    def output(self) -> str:
        """Return the part printed on exit (text after NUL when enabled)."""
        if self.enable_sep:
            _head, sep, tail = self.text.partition(NULL_SEPARATOR)
            if sep:
                return tail
        return self.text

    def indices(self) -> tuple[tuple[int, int], ...]:
        return ()


@dataclass(frozen=True)
class MatchedLine:
    raw: RawLine
    matches: tuple[tuple[int, int], ...] = ()

    @property
    def id(self) -> int:
        return self.raw.index

    @property
    def index(self) -> int:
        return self.raw.index

    def display_text(self) -> str:
        return self.raw.display_text()

    def output(self) -> str:
        return self.raw.output()

    def indices(self) -> tuple[tuple[int, int], ...]:
        return self.matches


Line = RawLine | MatchedLine


def raw_of(line: Line) -> RawLine:
    """Unwrap a matched line to the raw line it was built from."""
    if isinstance(line, MatchedLine):
        return line.raw
    return line


def merge_ranges(ranges: list[tuple[int, int]]) -> tuple[tuple[int, int], ...]:
    """Sort highlight ranges and fold overlapping or touching spans."""
    merged: list[tuple[int, int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            prev_start, prev_end = merged[-1]
            merged[-1] = (prev_start, max(prev_end, end))
            continue
        merged.append((start, end))
    return tuple(merged)

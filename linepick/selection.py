"""Set of lines marked for output, keyed by raw ordinal."""

from __future__ import annotations

from collections.abc import Iterator

from .line import Line, MatchedLine, RawLine, raw_of

INVALID_SELECTION_RANGE = -1


class Selection:
    """Not thread-safe on its own; ``Context`` guards it with the selection lock."""

    def __init__(self) -> None:
        self._lines: dict[int, RawLine] = {}

    def add(self, line: Line) -> None:
        raw = raw_of(line)
        self._lines[raw.id] = raw

    def remove(self, line: Line) -> None:
        self._lines.pop(raw_of(line).id, None)

    def has(self, line: Line) -> bool:
        return raw_of(line).id in self._lines

    def clear(self) -> None:
        self._lines.clear()

    def copy(self) -> Selection:
        dup = Selection()
        dup._lines = dict(self._lines)
        return dup

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, line: object) -> bool:
        return isinstance(line, (RawLine, MatchedLine)) and self.has(line)

    def __iter__(self) -> Iterator[RawLine]:
        """Yield selected lines in ingestion order."""
        for key in sorted(self._lines):
            yield self._lines[key]


__all__ = ["INVALID_SELECTION_RANGE", "Selection"]

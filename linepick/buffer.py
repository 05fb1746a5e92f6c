"""Line buffers: the capacity-bounded raw store and per-query filter results.

``RawLineBuffer`` is written by the reader loop only and read concurrently by
the filter, view and input loops. Every append and every ``replay`` pushes the
line onto an output queue that the stream watcher drains to schedule redraws.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from queue import Empty, SimpleQueue
from typing import Protocol

from .errors import OutOfRangeError
from .line import Line, MatchedLine, RawLine


class LineBuffer(Protocol):
    """Read-only random access shared by the store and filter results."""

    def line_at(self, index: int) -> Line: ...

    def size(self) -> int: ...


class RawLineBuffer:
    """Append-only line store with an optional capacity (0 means unbounded).

    Once the capacity is exceeded the oldest line becomes unreachable by
    position. Dead lines are kept behind a head offset and dropped in one
    slice once that prefix grows as large as the capacity.
    """

    def __init__(self, capacity: int = 0) -> None:
        self._lock = threading.Lock()
        self._lines: list[RawLine] = []
        self._head = 0
        self._capacity = max(0, int(capacity))
        self._output: SimpleQueue[RawLine] = SimpleQueue()

    @property
    def capacity(self) -> int:
        with self._lock:
            return self._capacity

    def set_capacity(self, capacity: int) -> None:
        with self._lock:
            self._capacity = max(0, int(capacity))
            self._evict_locked()

    def append_line(self, line: RawLine) -> None:
        with self._lock:
            self._lines.append(line)
            self._evict_locked()
        self._output.put(line)

    def _evict_locked(self) -> None:
        if self._capacity <= 0:
            return
        overflow = len(self._lines) - self._head - self._capacity
        if overflow > 0:
            self._head += overflow
        if self._head >= self._capacity:
            del self._lines[: self._head]
            self._head = 0

    def line_at(self, index: int) -> RawLine:
        with self._lock:
            size = len(self._lines) - self._head
            if index < 0 or index >= size:
                raise OutOfRangeError(index, size)
            return self._lines[self._head + index]

    def size(self) -> int:
        with self._lock:
            return len(self._lines) - self._head

    def __len__(self) -> int:
        return self.size()

    def snapshot(self) -> list[RawLine]:
        """Copy the retained lines so callers can iterate without the lock."""
        with self._lock:
            return self._lines[self._head :]

    def __iter__(self) -> Iterator[RawLine]:
        return iter(self.snapshot())

    def replay(self) -> int:
        """Re-emit every retained line through the output queue, in order."""
        lines = self.snapshot()
        for line in lines:
            self._output.put(line)
        return len(lines)

    def output_queue(self) -> SimpleQueue[RawLine]:
        return self._output

    def drain_output(self) -> list[RawLine]:
        """Drain all pending output notifications without blocking."""
        out: list[RawLine] = []
        while True:
            try:
                out.append(self._output.get_nowait())
            except Empty:
                break
        return out


class FilteredBuffer:
    """Result of one filter run; immutable once built."""

    def __init__(self, lines: Sequence[MatchedLine] = (), query: str = "") -> None:
        self._lines = tuple(lines)
        self.query = query

    def line_at(self, index: int) -> MatchedLine:
        if index < 0 or index >= len(self._lines):
            raise OutOfRangeError(index, len(self._lines))
        return self._lines[index]

    def size(self) -> int:
        return len(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[MatchedLine]:
        return iter(self._lines)


__all__ = ["FilteredBuffer", "LineBuffer", "RawLineBuffer"]

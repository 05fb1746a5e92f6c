"""Query text and caret editing state.

All mutators hold one lock and clamp the caret back into ``[0, len(query)]``
before releasing it, so readers never observe an out-of-range caret.
"""

from __future__ import annotations

import threading


def _clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper))


class QueryState:
    def __init__(self, query: str = "") -> None:
        self._lock = threading.Lock()
        self._query: list[str] = list(query)
        self._saved: list[str] = []
        self._caret = len(self._query)

    # readers
    def query(self) -> list[str]:
        with self._lock:
            return list(self._query)

    def query_string(self) -> str:
        with self._lock:
            return "".join(self._query)

    def query_len(self) -> int:
        with self._lock:
            return len(self._query)

    def saved_query(self) -> list[str]:
        with self._lock:
            return list(self._saved)

    def caret_pos(self) -> int:
        with self._lock:
            return self._caret

    def snapshot(self) -> tuple[str, int]:
        """Return ``(query, caret)`` read under one lock acquisition."""
        with self._lock:
            return "".join(self._query), self._caret

    # whole-query mutators
    def set_query(self, query: str | list[str]) -> None:
        """Replace the query and move the caret to its end."""
        with self._lock:
            self._query = list(query)
            self._caret = len(self._query)

    def set_saved_query(self, query: str | list[str]) -> None:
        with self._lock:
            self._saved = list(query)

    def toggle_saved_query(self) -> bool:
        """Stash a non-empty query, or bring the stashed one back.

        Returns False when both the query and the stash are empty.
        """
        with self._lock:
            if self._query:
                self._saved, self._query = self._query, []
            elif self._saved:
                self._query, self._saved = self._saved, []
            else:
                return False
            self._caret = len(self._query)
            return True

    # caret
    def set_caret_pos(self, where: int) -> None:
        with self._lock:
            self._caret = _clamp(where, len(self._query))

    def move_caret_pos(self, offset: int) -> None:
        with self._lock:
            self._caret = _clamp(self._caret + offset, len(self._query))

    # editing
    def append_query(self, ch: str) -> None:
        with self._lock:
            self._query.extend(ch)

    def insert_query_at(self, text: str, where: int) -> None:
        with self._lock:
            where = _clamp(where, len(self._query))
            self._query[where:where] = list(text)
            if self._caret >= where:
                self._caret += len(text)
            self._caret = _clamp(self._caret, len(self._query))

    def insert_at_caret(self, text: str) -> None:
        with self._lock:
            where = self._caret
            self._query[where:where] = list(text)
            self._caret = where + len(text)

    def delete_backward_char(self) -> bool:
        with self._lock:
            if self._caret <= 0:
                return False
            del self._query[self._caret - 1]
            self._caret -= 1
            return True

    def delete_forward_char(self) -> bool:
        with self._lock:
            if self._caret >= len(self._query):
                return False
            del self._query[self._caret]
            return True

    def delete_backward_word(self) -> bool:
        """Delete trailing spaces then the word left of the caret."""
        with self._lock:
            pos = self._caret
            if pos <= 0:
                return False
            start = pos
            while start > 0 and self._query[start - 1].isspace():
                start -= 1
            while start > 0 and not self._query[start - 1].isspace():
                start -= 1
            del self._query[start:pos]
            self._caret = start
            return True

    def kill_end_of_line(self) -> bool:
        with self._lock:
            if self._caret >= len(self._query):
                return False
            del self._query[self._caret :]
            return True

    def kill_beginning_of_line(self) -> bool:
        with self._lock:
            if self._caret <= 0:
                return False
            del self._query[: self._caret]
            self._caret = 0
            return True


__all__ = ["QueryState"]

"""Filter strategy interface.

A strategy turns a query and a sequence of candidate lines into a lazy,
single-pass iterator of ``MatchedLine``. Each strategy documents its own
ordering; the executor never reorders results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Protocol

from ..line import Line, MatchedLine

CANCEL_CHECK_INTERVAL = 256


class CancelToken(Protocol):
    """Anything with an ``is_set`` check; ``threading.Event`` qualifies."""

    def is_set(self) -> bool: ...


class QueryFilter(ABC):
    name: str = ""

    @abstractmethod
    def apply(
        self,
        query: str,
        lines: Iterable[Line],
        cancel: CancelToken | None = None,
    ) -> Iterator[MatchedLine]:
        """Yield the lines matching ``query``.

        Implementations stop early, without raising, once ``cancel`` is set.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def cancelled(cancel: CancelToken | None, count: int) -> bool:
    """Cheap periodic cancellation check for per-line loops."""
    return cancel is not None and count % CANCEL_CHECK_INTERVAL == 0 and cancel.is_set()


__all__ = ["CANCEL_CHECK_INTERVAL", "CancelToken", "QueryFilter", "cancelled"]

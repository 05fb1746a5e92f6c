"""Built-in in-process matchers.

The query is split on whitespace and every term must match somewhere in the
line's displayed text. Highlight ranges are all non-overlapping hits of all
terms, merged. Results keep source order.
"""

from __future__ import annotations

import re
import threading
from collections import OrderedDict
from collections.abc import Iterable, Iterator

from ..line import Line, MatchedLine, merge_ranges, raw_of
from .base import CancelToken, QueryFilter, cancelled

IGNORE_CASE = "IgnoreCase"
CASE_SENSITIVE = "CaseSensitive"
SMART_CASE = "SmartCase"
REGEXP = "Regexp"

PATTERN_CACHE_MAX = 64


class RegexpFilter(QueryFilter):
    """Matches each whitespace-separated term as a regular expression."""

    name = REGEXP
    quote_terms = False

    def __init__(self) -> None:
        self._cache: OrderedDict[tuple[str, int], tuple[re.Pattern[str], ...] | None] = OrderedDict()
        self._cache_lock = threading.Lock()

    def flags_for(self, query: str) -> int:
        return 0

    def compile_query(self, query: str) -> tuple[re.Pattern[str], ...] | None:
        """Compile ``query`` into one pattern per term; None if any is invalid."""
        flags = self.flags_for(query)
        key = (query, flags)
        with self._cache_lock:
            if key in self._cache:
                self._cache.move_to_end(key)
                return self._cache[key]

        patterns: tuple[re.Pattern[str], ...] | None
        try:
            patterns = tuple(
                re.compile(re.escape(term) if self.quote_terms else term, flags)
                for term in query.split()
            )
        except re.error:
            patterns = None

        with self._cache_lock:
            self._cache[key] = patterns
            while len(self._cache) > PATTERN_CACHE_MAX:
                self._cache.popitem(last=False)
        return patterns

    def match_line(self, patterns: tuple[re.Pattern[str], ...], line: Line) -> MatchedLine | None:
        text = line.display_text()
        ranges: list[tuple[int, int]] = []
        for pattern in patterns:
            hits = [m.span() for m in pattern.finditer(text) if m.end() > m.start()]
            if not hits:
                if pattern.search(text) is None:
                    return None
                continue
            ranges.extend(hits)
        return MatchedLine(raw_of(line), merge_ranges(ranges))

    def apply(
        self,
        query: str,
        lines: Iterable[Line],
        cancel: CancelToken | None = None,
    ) -> Iterator[MatchedLine]:
        patterns = self.compile_query(query)
        if patterns is None:
            return
        for count, line in enumerate(lines):
            if cancelled(cancel, count):
                return
            matched = self.match_line(patterns, line)
            if matched is not None:
                yield matched


class CaseSensitiveFilter(RegexpFilter):
    name = CASE_SENSITIVE
    quote_terms = True


class IgnoreCaseFilter(RegexpFilter):
    name = IGNORE_CASE
    quote_terms = True

    def flags_for(self, query: str) -> int:
        return re.IGNORECASE


class SmartCaseFilter(RegexpFilter):
    """Case-insensitive unless the query contains an uppercase character."""

    name = SMART_CASE
    quote_terms = True

    def flags_for(self, query: str) -> int:
        if any(ch.isupper() for ch in query):
            return 0
        return re.IGNORECASE


def builtin_filters() -> list[QueryFilter]:
    """Return fresh instances of the built-ins in registration order."""
    return [IgnoreCaseFilter(), CaseSensitiveFilter(), SmartCaseFilter(), RegexpFilter()]


__all__ = [
    "CASE_SENSITIVE",
    "CaseSensitiveFilter",
    "IGNORE_CASE",
    "IgnoreCaseFilter",
    "REGEXP",
    "RegexpFilter",
    "SMART_CASE",
    "SmartCaseFilter",
    "builtin_filters",
]

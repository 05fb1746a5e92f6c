"""Ordered, name-unique collection of filter strategies with a current index."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from ..errors import DuplicateFilterError, UnknownFilterError
from .base import QueryFilter
from .regexp import builtin_filters


class FilterSet:
    def __init__(self, filters: Iterable[QueryFilter] | None = None) -> None:
        self._lock = threading.Lock()
        self._filters: list[QueryFilter] = []
        self._current = 0
        for query_filter in builtin_filters() if filters is None else filters:
            self.add(query_filter)
        if not self._filters:
            raise ValueError("a filter set needs at least one filter")

    def add(self, query_filter: QueryFilter) -> None:
        with self._lock:
            if any(existing.name == query_filter.name for existing in self._filters):
                raise DuplicateFilterError(query_filter.name)
            self._filters.append(query_filter)

    def rotate(self) -> QueryFilter:
        """Advance the current filter in registration order, wrapping."""
        with self._lock:
            self._current = (self._current + 1) % len(self._filters)
            return self._filters[self._current]

    def set_current_by_name(self, name: str) -> QueryFilter:
        with self._lock:
            for idx, query_filter in enumerate(self._filters):
                if query_filter.name == name:
                    self._current = idx
                    return query_filter
        raise UnknownFilterError(name)

    def current(self) -> QueryFilter:
        with self._lock:
            return self._filters[self._current]

    def get(self, name: str) -> QueryFilter:
        with self._lock:
            for query_filter in self._filters:
                if query_filter.name == name:
                    return query_filter
        raise UnknownFilterError(name)

    def names(self) -> list[str]:
        with self._lock:
            return [query_filter.name for query_filter in self._filters]

    def __len__(self) -> int:
        with self._lock:
            return len(self._filters)


__all__ = ["FilterSet"]

"""Shared state coordinator.

``Context`` owns every piece of mutable state the loops share: the query and
caret, the raw line store and the active (possibly filtered) buffer, the page
and cursor position, the selection, and the filter registry. Each group has
its own lock; no lock is held while publishing to the hub or running a
filter. Cross-group reads resolve one group first, release it, then take the
next, always in the order buffers -> page -> selection.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from .buffer import FilteredBuffer, LineBuffer, RawLineBuffer
from .config import LAYOUT_TOP_DOWN, Config, is_valid_layout
from .debounce import QueryDebouncer
from .errors import ConfigError, OutOfRangeError
from .filters import ExternalCommandFilter, FilterSet, QueryFilter
from .hub import DEFAULT_HUB_BUFFER_SIZE, DrawRequest, Hub
from .lifecycle import Lifecycle
from .line import Line, RawLine
from .query import QueryState
from .selection import INVALID_SELECTION_RANGE, Selection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContextOptions:
    """Startup options that come from the command line."""

    enable_null_sep: bool = False
    buffer_size: int = 0
    initial_index: int = 0
    layout_type: str = ""


@dataclass(frozen=True)
class PageInfo:
    page: int = 1
    offset: int = 0
    per_page: int = 0
    total: int = 0
    max_page: int = 1


@dataclass(frozen=True)
class ViewSnapshot:
    """Read-only picture of the state a renderer needs for one frame."""

    query: str
    caret: int
    prompt: str
    filter_name: str
    layout: str
    buffer: LineBuffer
    filtered: bool
    total_lines: int
    current_line: int
    page: PageInfo
    range_start: int
    selection: Selection = field(repr=False)

    def is_selected(self, row: int) -> bool:
        if self.range_start != INVALID_SELECTION_RANGE:
            low, high = sorted((self.range_start, self.current_line))
            if low <= row <= high:
                return True
        try:
            line = self.buffer.line_at(row)
        except OutOfRangeError:
            return False
        return self.selection.has(line)


class Context:
    def __init__(
        self,
        options: ContextOptions | None = None,
        config: Config | None = None,
        hub_buffer_size: int = DEFAULT_HUB_BUFFER_SIZE,
    ) -> None:
        self.hub = Hub(hub_buffer_size)
        self.lifecycle = Lifecycle(self.hub)
        self.input_ready = threading.Event()
        self._config = config if config is not None else Config()
        self._enable_sep = False
        self._layout_type = LAYOUT_TOP_DOWN

        self._query = QueryState()
        self._filters = FilterSet()

        self._buffer_lock = threading.Lock()
        self._raw = RawLineBuffer()
        self._active: FilteredBuffer | None = None
        self._next_index = 0

        self._page_lock = threading.Lock()
        self._page = PageInfo()
        self._current_line = 0
        self._current_col = 0

        self._selection_lock = threading.Lock()
        self._selection = Selection()
        self._range_start = INVALID_SELECTION_RANGE

        self._result_lock = threading.Lock()
        self._result: list[RawLine] | None = None

        self._debouncer = QueryDebouncer(self._config.query_execution_delay_seconds, self.hub.send_query)

        if options is not None:
            self._enable_sep = options.enable_null_sep
            self._current_line = max(0, options.initial_index)
            self._raw.set_capacity(options.buffer_size)
            if options.layout_type:
                self._layout_type = options.layout_type

    # configuration
    @property
    def config(self) -> Config:
        return self._config

    @property
    def enable_sep(self) -> bool:
        return self._enable_sep

    def apply_config(self, config: Config, layout_override: str = "") -> None:
        """Install rc-file settings: custom filters, initial filter, layout.

        Raises ``DuplicateFilterError``/``UnknownFilterError``/``ConfigError``
        for unusable settings; nothing here runs after the terminal is taken.
        """
        self._config = config
        self._debouncer.delay_seconds = config.query_execution_delay_seconds
        self.load_custom_filters()
        self.set_current_filter_by_name(config.initial_filter)
        layout = layout_override or config.layout
        if not is_valid_layout(layout):
            raise ConfigError(f"unknown layout: {layout!r}")
        self._layout_type = layout

    def load_custom_filters(self) -> None:
        for name, spec in self._config.custom_filters.items():
            self._filters.add(
                ExternalCommandFilter(
                    name,
                    spec.cmd,
                    spec.args,
                    threshold=spec.buffer_threshold,
                    enable_sep=self._enable_sep,
                )
            )

    def prompt(self) -> str:
        return self._config.prompt

    def set_prompt(self, prompt: str) -> None:
        self._config.prompt = prompt

    def layout_type(self) -> str:
        return self._layout_type

    # query / caret
    @property
    def query_state(self) -> QueryState:
        return self._query

    def query(self) -> list[str]:
        return self._query.query()

    def query_string(self) -> str:
        return self._query.query_string()

    def query_len(self) -> int:
        return self._query.query_len()

    def set_query(self, query: str | list[str]) -> None:
        self._query.set_query(query)

    def saved_query(self) -> list[str]:
        return self._query.saved_query()

    def set_saved_query(self, query: str | list[str]) -> None:
        self._query.set_saved_query(query)

    def insert_query_at(self, text: str, where: int) -> None:
        self._query.insert_query_at(text, where)

    def caret_pos(self) -> int:
        return self._query.caret_pos()

    def set_caret_pos(self, where: int) -> None:
        self._query.set_caret_pos(where)

    def move_caret_pos(self, offset: int) -> None:
        self._query.move_caret_pos(offset)

    def exec_query(self) -> bool:
        """Schedule the current query for filtering.

        Returns False only when the query is empty and nothing was filtered.
        """
        if self.query_len() <= 0:
            if self.is_filtered():
                self.reset_active_line_buffer()
                return True
            return False

        if self._debouncer.delay_seconds <= 0:
            self.hub.send_query(self.query_string())
            return True

        self._debouncer.arm(self.query_string)
        return True

    # lines
    def add_raw_line(self, text: str) -> RawLine:
        with self._buffer_lock:
            line = RawLine(self._next_index, text, self._enable_sep)
            self._next_index += 1
        self._raw.append_line(line)
        return line

    @property
    def raw_line_buffer(self) -> RawLineBuffer:
        return self._raw

    def raw_line_buffer_size(self) -> int:
        return self._raw.size()

    def current_line_buffer(self) -> LineBuffer:
        with self._buffer_lock:
            if self._active is not None:
                return self._active
            return self._raw

    def is_filtered(self) -> bool:
        with self._buffer_lock:
            return self._active is not None

    def set_active_line_buffer(self, buffer: FilteredBuffer) -> None:
        """Install a filter result as the active buffer and redraw."""
        with self._buffer_lock:
            self._active = buffer
        self._active_changed()
        self.set_current_line(0)
        self.hub.send_draw()

    def install_filter_result(self, buffer: FilteredBuffer) -> bool:
        """Install ``buffer`` only if it answers the query as it stands now.

        The query is compared under the buffer lock, so an edit that clears
        the query either happens first (the result is dropped) or finds the
        result installed and resets it through ``exec_query``.
        """
        with self._buffer_lock:
            if self.query_string() != buffer.query:
                logger.debug("dropping result for stale query %r", buffer.query)
                return False
            self._active = buffer
        self._active_changed()
        self.set_current_line(0)
        self.hub.send_draw()
        return True

    def reset_active_line_buffer(self) -> None:
        """Drop the filter result and show the whole store again."""
        with self._buffer_lock:
            self._active = None
        self._active_changed()
        self._raw.replay()
        self.clamp_current_line()
        self.hub.send_draw()

    def _active_changed(self) -> None:
        # Range rows index the previous sequence.
        if self.is_range_mode():
            logger.debug("active lines replaced; leaving range mode")
            self.cancel_range_mode()

    def line_at(self, row: int) -> Line:
        return self.current_line_buffer().line_at(row)

    # filters
    @property
    def filters(self) -> FilterSet:
        return self._filters

    def filter(self) -> QueryFilter:
        return self._filters.current()

    def rotate_filter(self) -> QueryFilter:
        return self._filters.rotate()

    def set_current_filter_by_name(self, name: str) -> QueryFilter:
        return self._filters.set_current_by_name(name)

    # page / cursor
    def page_info(self) -> PageInfo:
        with self._page_lock:
            return self._page

    def set_page_info(self, page: PageInfo) -> None:
        with self._page_lock:
            self._page = page

    def current_line(self) -> int:
        with self._page_lock:
            return self._current_line

    def set_current_line(self, row: int) -> None:
        with self._page_lock:
            self._current_line = max(0, row)

    def clamp_current_line(self) -> int:
        size = self.current_line_buffer().size()
        with self._page_lock:
            self._current_line = max(0, min(self._current_line, size - 1))
            return self._current_line

    def move_current_line(self, delta: int) -> int:
        size = self.current_line_buffer().size()
        with self._page_lock:
            self._current_line = max(0, min(self._current_line + delta, size - 1))
            return self._current_line

    def current_col(self) -> int:
        with self._page_lock:
            return self._current_col

    def set_current_col(self, col: int) -> None:
        with self._page_lock:
            self._current_col = max(0, col)

    # selection
    def _resolve(self, row: int) -> Line | None:
        try:
            return self.current_line_buffer().line_at(row)
        except OutOfRangeError:
            return None

    def selection_add(self, row: int) -> None:
        line = self._resolve(row)
        if line is None:
            return
        with self._selection_lock:
            self._selection.add(line)

    def selection_remove(self, row: int) -> None:
        line = self._resolve(row)
        if line is None:
            return
        with self._selection_lock:
            self._selection.remove(line)

    def selection_contains(self, row: int) -> bool:
        line = self._resolve(row)
        if line is None:
            return False
        with self._selection_lock:
            return self._selection.has(line)

    def selection_clear(self) -> None:
        with self._selection_lock:
            self._selection = Selection()
            self._range_start = INVALID_SELECTION_RANGE

    def selection_len(self) -> int:
        with self._selection_lock:
            return len(self._selection)

    def selected_lines(self) -> list[RawLine]:
        with self._selection_lock:
            return list(self._selection)

    def is_range_mode(self) -> bool:
        with self._selection_lock:
            return self._range_start != INVALID_SELECTION_RANGE

    def selection_range_start(self) -> int:
        with self._selection_lock:
            return self._range_start

    def start_range_mode(self) -> None:
        row = self.current_line()
        with self._selection_lock:
            self._range_start = row

    def cancel_range_mode(self) -> None:
        with self._selection_lock:
            self._range_start = INVALID_SELECTION_RANGE

    def range_rows(self) -> range:
        """Rows covered by the active range (empty outside range mode)."""
        row = self.current_line()
        with self._selection_lock:
            anchor = self._range_start
        if anchor == INVALID_SELECTION_RANGE:
            return range(0)
        low, high = sorted((anchor, row))
        return range(low, high + 1)

    def materialize_range(self) -> None:
        """Add every row of the active range to the selection and leave range mode."""
        rows = self.range_rows()
        buffer = self.current_line_buffer()
        lines: list[Line] = []
        for row in rows:
            try:
                lines.append(buffer.line_at(row))
            except OutOfRangeError:
                break
        with self._selection_lock:
            for line in lines:
                self._selection.add(line)
            self._range_start = INVALID_SELECTION_RANGE

    def is_selected(self, row: int) -> bool:
        """Membership check that also counts rows inside the active range."""
        if row in self.range_rows():
            return True
        return self.selection_contains(row)

    # snapshot
    def snapshot(self) -> ViewSnapshot:
        query, caret = self._query.snapshot()
        with self._buffer_lock:
            active = self._active
        buffer: LineBuffer = active if active is not None else self._raw
        with self._page_lock:
            page = self._page
            current = self._current_line
        with self._selection_lock:
            selection = self._selection.copy()
            range_start = self._range_start
        return ViewSnapshot(
            query=query,
            caret=caret,
            prompt=self._config.prompt,
            filter_name=self._filters.current().name,
            layout=self._layout_type,
            buffer=buffer,
            filtered=active is not None,
            total_lines=buffer.size(),
            current_line=current,
            page=page,
            range_start=range_start,
            selection=selection,
        )

    # results
    def set_result(self, lines: list[RawLine]) -> None:
        with self._result_lock:
            self._result = list(lines)

    def result_lines(self) -> list[RawLine] | None:
        """Lines chosen on a clean finish; None when the session was cancelled."""
        with self._result_lock:
            return None if self._result is None else list(self._result)

    # lifecycle
    def add_wait_group(self, delta: int = 1) -> None:
        self.lifecycle.add(delta)

    def release_wait_group(self) -> None:
        self.lifecycle.release()

    def wait_done(self, timeout: float | None = None) -> BaseException | None:
        return self.lifecycle.wait(timeout)

    def spawn_loop(self, target: Callable[[], None], name: str) -> threading.Thread:
        return self.lifecycle.spawn(target, name)

    def error(self) -> BaseException | None:
        return self.lifecycle.error()

    def exit_with(self, err: BaseException | None) -> None:
        self._debouncer.cancel()
        self.lifecycle.request_stop(err)

    def stop(self) -> None:
        self.exit_with(None)

    def stopped(self) -> bool:
        return self.hub.stopped

    def send_draw(self, purge: bool = False) -> None:
        self.hub.send_draw(DrawRequest(purge=purge))

    def draw_prompt(self) -> None:
        self.hub.send_draw_prompt()


__all__ = ["Context", "ContextOptions", "PageInfo", "ViewSnapshot"]

"""Renderer loop and frame composition.

``View`` waits on the hub's draw, prompt, status and paging channels, applies
cursor movement, and repaints from a ``ViewSnapshot``. Frame composition is a
pure function of the snapshot so layouts can be checked without a terminal.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

from .ansi import RESET, clip_text, display_width, styled_row
from .config import LAYOUT_BOTTOM_UP
from .context import Context, PageInfo, ViewSnapshot
from .errors import OutOfRangeError
from .hub import (
    PAGING_DOWN,
    PAGING_NEXT_PAGE,
    PAGING_PREVIOUS_PAGE,
    PAGING_UP,
    PagingRequest,
    StatusMessage,
)
from .ui_theme import DEFAULT_THEME, UITheme

logger = logging.getLogger(__name__)

VIEW_POLL_SECONDS = 0.1
# Prompt row plus status row.
CHROME_ROWS = 2


def list_rows(height: int) -> int:
    return max(1, height - CHROME_ROWS)


def compute_page(current_line: int, total: int, per_page: int) -> PageInfo:
    per_page = max(1, per_page)
    page = current_line // per_page + 1
    return PageInfo(
        page=page,
        offset=(page - 1) * per_page,
        per_page=per_page,
        total=total,
        max_page=max(1, math.ceil(total / per_page)),
    )


def move_cursor(current: int, total: int, per_page: int, request: PagingRequest, bottom_up: bool) -> int:
    """Return the new cursor row for ``request``.

    Single steps wrap around the ends; page steps clamp. In the bottom-up
    layout the first line sits next to the prompt, so "up" means the next row.
    """
    if total <= 0:
        return 0
    kind = request.kind
    if bottom_up:
        kind = {
            PAGING_UP: PAGING_DOWN,
            PAGING_DOWN: PAGING_UP,
            PAGING_NEXT_PAGE: PAGING_PREVIOUS_PAGE,
            PAGING_PREVIOUS_PAGE: PAGING_NEXT_PAGE,
        }.get(kind, kind)
    count = max(1, request.count)
    if kind == PAGING_DOWN:
        return (current + count) % total
    if kind == PAGING_UP:
        return (current - count) % total
    if kind == PAGING_NEXT_PAGE:
        return min(total - 1, current + per_page * count)
    if kind == PAGING_PREVIOUS_PAGE:
        return max(0, current - per_page * count)
    return current


def prompt_row(snapshot: ViewSnapshot, width: int, theme: UITheme = DEFAULT_THEME) -> str:
    prefix = f"{snapshot.prompt} "
    info = f" {snapshot.filter_name} [{snapshot.page.page}/{snapshot.page.max_page}]"
    room = max(0, width - display_width(prefix) - display_width(info))
    query = snapshot.query
    caret = min(snapshot.caret, len(query))
    before = query[:caret]
    at = query[caret] if caret < len(query) else " "
    after = query[caret + 1 :]
    # Keep the caret visible by dropping leading characters when it overflows.
    while before and display_width(before) + 1 > room:
        before = before[1:]
    tail_room = max(0, room - display_width(before) - display_width(at))
    after = clip_text(after, tail_room)
    used = display_width(prefix) + display_width(before) + display_width(at) + display_width(after)
    pad = " " * max(0, width - used - display_width(info))
    if used + display_width(info) > width:
        info = ""
    return "".join(
        (
            RESET,
            theme.prompt,
            clip_text(prefix, width),
            RESET,
            theme.query,
            before,
            theme.caret,
            at,
            RESET,
            theme.query,
            after,
            RESET,
            pad,
            theme.filter_name,
            info,
            RESET,
        )
    )


def line_rows(snapshot: ViewSnapshot, width: int, rows: int, theme: UITheme = DEFAULT_THEME) -> list[str]:
    """Render the visible page of the active buffer, first line first."""
    out: list[str] = []
    offset = snapshot.page.offset
    for row in range(offset, offset + rows):
        try:
            line = snapshot.buffer.line_at(row)
        except OutOfRangeError:
            out.append(" " * width)
            continue
        if row == snapshot.current_line:
            base = theme.cursor
        elif snapshot.is_selected(row):
            base = theme.selected
        else:
            base = theme.basic
        out.append(styled_row(line.display_text(), line.indices(), width, base, theme.match))
    return out


def render_frame(
    snapshot: ViewSnapshot,
    width: int,
    height: int,
    status: str = "",
    theme: UITheme = DEFAULT_THEME,
) -> list[str]:
    """Return exactly ``height`` screen rows for ``snapshot``."""
    rows = list_rows(height)
    body = line_rows(snapshot, width, rows, theme)
    status_row = RESET + theme.status + clip_text(status, width).ljust(width) + RESET
    prompt = prompt_row(snapshot, width, theme)
    if snapshot.layout == LAYOUT_BOTTOM_UP:
        frame = [status_row, *reversed(body), prompt]
    else:
        frame = [prompt, *body, status_row]
    return frame[:height] if height >= CHROME_ROWS + 1 else [prompt]


class View:
    def __init__(
        self,
        ctx: Context,
        write: Callable[[str], None],
        size: Callable[[], tuple[int, int]],
        theme: UITheme = DEFAULT_THEME,
        poll_seconds: float = VIEW_POLL_SECONDS,
    ) -> None:
        self.ctx = ctx
        self._write = write
        self._size = size
        self.theme = theme
        self.poll_seconds = poll_seconds
        self._status = ""
        self._status_until = 0.0
        self._last_size: tuple[int, int] | None = None

    def set_status(self, message: StatusMessage) -> None:
        self._status = message.text
        self._status_until = time.monotonic() + message.clear_after if message.clear_after > 0 else 0.0

    def _expire_status(self) -> bool:
        if self._status and self._status_until and time.monotonic() >= self._status_until:
            self._status = ""
            self._status_until = 0.0
            return True
        return False

    def refresh_page(self, width: int, height: int) -> PageInfo:
        ctx = self.ctx
        total = ctx.current_line_buffer().size()
        current = ctx.clamp_current_line()
        page = compute_page(current, total, list_rows(height))
        ctx.set_page_info(page)
        return page

    def apply_paging(self, request: PagingRequest, height: int) -> None:
        ctx = self.ctx
        total = ctx.current_line_buffer().size()
        current = ctx.current_line()
        bottom_up = ctx.layout_type() == LAYOUT_BOTTOM_UP
        ctx.set_current_line(move_cursor(current, total, list_rows(height), request, bottom_up))

    def draw(self, purge: bool = False) -> None:
        width, height = self._size()
        self.refresh_page(width, height)
        frame = render_frame(self.ctx.snapshot(), width, height, self._status, self.theme)
        parts = ["\033[2J" if purge else "", "\033[H"]
        for idx, row in enumerate(frame):
            parts.append(f"\033[{idx + 1};1H{row}\033[K")
        self._write("".join(parts))
        self._last_size = (width, height)

    def draw_prompt(self) -> None:
        width, height = self._size()
        snapshot = self.ctx.snapshot()
        row = height if snapshot.layout == LAYOUT_BOTTOM_UP else 1
        self._write(f"\033[{row};1H{prompt_row(snapshot, width, self.theme)}\033[K")

    def loop(self) -> None:
        ctx = self.ctx
        hub = ctx.hub
        logger.debug("view loop: start")
        self.draw(purge=True)
        while not hub.stopped:
            event = hub.wait_view_event(timeout=self.poll_seconds)
            redraw = self._expire_status() or self._size() != self._last_size
            purge = False
            prompt_only = False
            if event:
                _, height = self._size()
                while (request := hub.receive_paging(timeout=0)) is not None:
                    self.apply_paging(request, height)
                    redraw = True
                while (message := hub.receive_status_msg(timeout=0)) is not None:
                    self.set_status(message)
                    redraw = True
                draw_request = hub.receive_draw(timeout=0)
                if draw_request is not None:
                    redraw = True
                    purge = draw_request.purge
                prompt_only = hub.receive_draw_prompt(timeout=0)
            if hub.stopped:
                break
            if redraw:
                self.draw(purge=purge)
            elif prompt_only:
                self.draw_prompt()
        logger.debug("view loop: stop")


__all__ = [
    "View",
    "compute_page",
    "line_rows",
    "list_rows",
    "move_cursor",
    "prompt_row",
    "render_frame",
]

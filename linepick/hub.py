"""Event bus connecting the reader, filter, input and view loops.

Hint channels (draw, prompt redraw, query) are latest-wins slots: publishing
twice before the consumer wakes up leaves one pending value. Pending draw
requests keep a purge asked for by any of them. Status messages
and paging requests go through short FIFOs that drop their oldest entry when
full. No publish ever blocks.

``stop()`` is the broadcast cancellation signal. It wakes every blocked
receiver, after which all ``receive_*`` calls return ``None``.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_HUB_BUFFER_SIZE = 5


@dataclass(frozen=True)
class DrawRequest:
    """Redraw hint. ``purge`` asks the view to drop any cached frame."""

    purge: bool = False


@dataclass(frozen=True)
class StatusMessage:
    text: str
    clear_after: float = 0.0


@dataclass(frozen=True)
class PagingRequest:
    """Cursor movement request; ``kind`` is one of the ``PAGING_*`` names."""

    kind: str
    count: int = 1


PAGING_UP = "up"
PAGING_DOWN = "down"
PAGING_PREVIOUS_PAGE = "previous_page"
PAGING_NEXT_PAGE = "next_page"


def _merge_draw(pending: DrawRequest, new: DrawRequest) -> DrawRequest:
    return DrawRequest(purge=pending.purge or new.purge)


class _Channel(Generic[T]):
    """Single-consumer channel; all channels of a hub share one condition."""

    def __init__(
        self,
        cond: threading.Condition,
        stop_event: threading.Event,
        maxlen: int | None,
        merge: Callable[[T, T], T] | None = None,
    ) -> None:
        self._cond = cond
        self._items: deque[T] = deque(maxlen=maxlen)
        self._stop_event = stop_event
        self._merge = merge

    def send(self, value: T) -> None:
        with self._cond:
            if self._stop_event.is_set():
                return
            if self._merge is not None and self._items:
                value = self._merge(self._items.pop(), value)
            self._items.append(value)
            self._cond.notify_all()

    def receive(self, timeout: float | None = None) -> T | None:
        with self._cond:
            self._cond.wait_for(
                lambda: bool(self._items) or self._stop_event.is_set(),
                timeout=timeout,
            )
            if self._stop_event.is_set() or not self._items:
                return None
            return self._items.popleft()

    def pending(self) -> bool:
        with self._cond:
            return bool(self._items)

    def pending_locked(self) -> bool:
        return bool(self._items)


class Hub:
    """Typed publish/receive operations over the bus channels."""

    def __init__(self, buffer_size: int = DEFAULT_HUB_BUFFER_SIZE) -> None:
        depth = max(1, int(buffer_size))
        self._cond = threading.Condition()
        self._stop_event = threading.Event()
        self._draw: _Channel[DrawRequest] = _Channel(self._cond, self._stop_event, 1, _merge_draw)
        self._draw_prompt: _Channel[bool] = _Channel(self._cond, self._stop_event, 1)
        self._query: _Channel[str] = _Channel(self._cond, self._stop_event, 1)
        self._status: _Channel[StatusMessage] = _Channel(self._cond, self._stop_event, depth)
        self._paging: _Channel[PagingRequest] = _Channel(self._cond, self._stop_event, depth)
        self._view_channels = (self._draw, self._draw_prompt, self._status, self._paging)

    # stop
    def stop(self) -> bool:
        """Broadcast the stop signal. Returns True only for the first call."""
        with self._cond:
            if self._stop_event.is_set():
                return False
            self._stop_event.set()
            self._cond.notify_all()
        logger.debug("hub: stop broadcast")
        return True

    def wait_view_event(self, timeout: float | None = None) -> bool:
        """Block until a draw, prompt, status or paging event is pending.

        Returns False on timeout or once the hub is stopped.
        """
        with self._cond:
            self._cond.wait_for(
                lambda: self._stop_event.is_set()
                or any(channel.pending_locked() for channel in self._view_channels),
                timeout=timeout,
            )
            if self._stop_event.is_set():
                return False
            return any(channel.pending_locked() for channel in self._view_channels)

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def wait_stopped(self, timeout: float | None = None) -> bool:
        return self._stop_event.wait(timeout)

    # draw
    def send_draw(self, request: DrawRequest | None = None) -> None:
        self._draw.send(request or DrawRequest())

    def receive_draw(self, timeout: float | None = None) -> DrawRequest | None:
        return self._draw.receive(timeout)

    def draw_pending(self) -> bool:
        return self._draw.pending()

    # prompt
    def send_draw_prompt(self) -> None:
        self._draw_prompt.send(True)

    def receive_draw_prompt(self, timeout: float | None = None) -> bool:
        return bool(self._draw_prompt.receive(timeout))

    # status
    def send_status_msg(self, text: str, clear_after: float = 0.0) -> None:
        self._status.send(StatusMessage(text=text, clear_after=clear_after))

    def receive_status_msg(self, timeout: float | None = None) -> StatusMessage | None:
        return self._status.receive(timeout)

    # query
    def send_query(self, query: str) -> None:
        logger.debug("hub: query %r", query)
        self._query.send(query)

    def receive_query(self, timeout: float | None = None) -> str | None:
        return self._query.receive(timeout)

    def query_pending(self) -> bool:
        return self._query.pending()

    # paging
    def send_paging(self, kind: str, count: int = 1) -> None:
        self._paging.send(PagingRequest(kind=kind, count=count))

    def receive_paging(self, timeout: float | None = None) -> PagingRequest | None:
        return self._paging.receive(timeout)


__all__ = [
    "DEFAULT_HUB_BUFFER_SIZE",
    "DrawRequest",
    "Hub",
    "PAGING_DOWN",
    "PAGING_NEXT_PAGE",
    "PAGING_PREVIOUS_PAGE",
    "PAGING_UP",
    "PagingRequest",
    "StatusMessage",
]

"""Filter executor loop.

Takes dispatched queries off the hub, runs the current strategy over a
snapshot of the raw store and installs the result as the active buffer. A run
is abandoned as soon as a newer query is pending or the hub stops.
"""

from __future__ import annotations

import logging

from .buffer import FilteredBuffer
from .context import Context
from .errors import ExternalFilterError
from .hub import Hub
from .line import MatchedLine

logger = logging.getLogger(__name__)

FILTER_POLL_SECONDS = 0.1
SUPERSEDE_CHECK_INTERVAL = 64


class Supersession:
    """Cancel token that trips once a newer query arrives or the hub stops."""

    def __init__(self, hub: Hub) -> None:
        self._hub = hub

    def is_set(self) -> bool:
        return self._hub.stopped or self._hub.query_pending()


class FilterLoop:
    def __init__(self, ctx: Context, poll_seconds: float = FILTER_POLL_SECONDS) -> None:
        self.ctx = ctx
        self.poll_seconds = poll_seconds

    def loop(self) -> None:
        hub = self.ctx.hub
        logger.debug("filter loop: start")
        while not hub.stopped:
            query = hub.receive_query(timeout=self.poll_seconds)
            if query is None:
                continue
            self.work(query)
        logger.debug("filter loop: stop")

    def work(self, query: str) -> FilteredBuffer | None:
        """Run one query; returns the installed buffer, or None if discarded."""
        ctx = self.ctx
        if not query:
            if ctx.is_filtered():
                ctx.reset_active_line_buffer()
            return None

        cancel = Supersession(ctx.hub)
        query_filter = ctx.filter()
        lines = ctx.raw_line_buffer.snapshot()
        logger.debug("filter %s: %r over %d lines", query_filter.name, query, len(lines))

        results: list[MatchedLine] = []
        try:
            for count, matched in enumerate(query_filter.apply(query, lines, cancel)):
                if count % SUPERSEDE_CHECK_INTERVAL == 0 and cancel.is_set():
                    logger.debug("filter %s: %r superseded", query_filter.name, query)
                    return None
                results.append(matched)
        except ExternalFilterError as exc:
            logger.debug("filter %s failed: %s", query_filter.name, exc)
            ctx.hub.send_status_msg(str(exc), clear_after=3.0)
            results = []

        if cancel.is_set():
            return None

        buffer = FilteredBuffer(results, query)
        if not ctx.install_filter_result(buffer):
            return None
        return buffer


__all__ = ["FilterLoop", "Supersession"]

"""Ingestion side: the source reader loop and the stream watcher.

``ReaderLoop`` feeds the raw store line by line and raises ``input_ready``
on the first line (or at EOF, so an empty source never blocks startup). Real
file descriptors are polled with ``select`` so the loop notices a stop even
while the source is idle. ``StreamWatcher`` drains the store's
notifications, including replays, and turns bursts of them into throttled
draw hints.
"""

from __future__ import annotations

import codecs
import io
import logging
import os
import select
import time
from collections.abc import Iterator
from queue import Empty
from typing import IO

from .context import Context

logger = logging.getLogger(__name__)

READ_POLL_SECONDS = 0.1
READ_CHUNK_BYTES = 64 * 1024
STREAM_POLL_SECONDS = 0.1
STREAM_DRAW_INTERVAL_SECONDS = 0.01


def strip_line_terminator(raw: str) -> str:
    if raw.endswith("\r\n"):
        return raw[:-2]
    if raw.endswith("\n") or raw.endswith("\r"):
        return raw[:-1]
    return raw


def _source_fd(source: IO) -> int | None:
    try:
        return source.fileno()
    except (AttributeError, OSError, io.UnsupportedOperation):
        return None


class ReaderLoop:
    def __init__(self, ctx: Context, source: IO, poll_seconds: float = READ_POLL_SECONDS) -> None:
        self.ctx = ctx
        self.source = source
        self.poll_seconds = poll_seconds

    def _lines_from_fd(self, fd: int) -> Iterator[str]:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        while not self.ctx.stopped():
            ready, _, _ = select.select([fd], [], [], self.poll_seconds)
            if not ready:
                continue
            chunk = os.read(fd, READ_CHUNK_BYTES)
            if not chunk:
                break
            pending += decoder.decode(chunk)
            *complete, pending = pending.split("\n")
            yield from complete
        pending += decoder.decode(b"", final=True)
        if pending:
            yield pending

    def lines(self) -> Iterator[str]:
        fd = _source_fd(self.source)
        if fd is None:
            for raw in self.source:
                if isinstance(raw, bytes):
                    raw = raw.decode("utf-8", errors="replace")
                yield strip_line_terminator(raw)
            return
        for raw in self._lines_from_fd(fd):
            yield raw[:-1] if raw.endswith("\r") else raw

    def loop(self) -> None:
        ctx = self.ctx
        count = 0
        try:
            for text in self.lines():
                if ctx.stopped():
                    break
                ctx.add_raw_line(text)
                count += 1
                if count == 1:
                    ctx.input_ready.set()
        finally:
            ctx.input_ready.set()
            logger.debug("reader loop: done after %d lines", count)
        ctx.send_draw()


class StreamWatcher:
    def __init__(
        self,
        ctx: Context,
        poll_seconds: float = STREAM_POLL_SECONDS,
        draw_interval: float = STREAM_DRAW_INTERVAL_SECONDS,
    ) -> None:
        self.ctx = ctx
        self.poll_seconds = poll_seconds
        self.draw_interval = draw_interval

    def loop(self) -> None:
        ctx = self.ctx
        output = ctx.raw_line_buffer.output_queue()
        last_draw = 0.0
        pending = False
        while not ctx.stopped():
            try:
                output.get(timeout=self.poll_seconds)
                pending = True
            except Empty:
                if pending:
                    ctx.send_draw()
                    pending = False
                continue
            now = time.monotonic()
            if now - last_draw >= self.draw_interval:
                ctx.send_draw()
                last_draw = now
                pending = False


__all__ = ["ReaderLoop", "StreamWatcher", "strip_line_terminator"]

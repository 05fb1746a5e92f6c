"""Session composition.

Builds the context from the rc file and command-line options, starts the
reader, waits for the first line, then takes over the tty and runs every loop
until one of them stops the session.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from .config import load_config
from .context import Context, ContextOptions
from .filter_loop import FilterLoop
from .input_loop import Input
from .keymap import Keymap
from .keys import KeyReader
from .line import RawLine
from .reader import ReaderLoop, StreamWatcher
from .signals import SignalHandler
from .terminal import DEFAULT_TTY_PATH, TerminalController
from .ui_theme import resolve_theme
from .view import View

logger = logging.getLogger(__name__)

TRACE_ENV = "LINEPICK_TRACE"
TRACE_FORMAT = "%(asctime)s %(threadName)s %(name)s %(levelname)s %(message)s"


@dataclass(frozen=True)
class SessionOptions:
    query: str = ""
    rcfile: Path | None = None
    buffer_size: int = 0
    enable_null_sep: bool = False
    initial_index: int = 0
    initial_filter: str = ""
    prompt: str = ""
    layout: str = ""
    tty_path: str = DEFAULT_TTY_PATH
    theme: str = ""


@dataclass(frozen=True)
class SessionResult:
    """Outcome of one session; ``lines`` is None when it was cancelled."""

    lines: list[RawLine] | None
    error: BaseException | None = None


def configure_logging(trace_path: str | None = None) -> logging.Handler | None:
    """Attach a DEBUG file handler when tracing is requested."""
    path = trace_path or os.environ.get(TRACE_ENV)
    if not path:
        return None
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(TRACE_FORMAT))
    root = logging.getLogger("linepick")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    return handler


def build_context(options: SessionOptions) -> tuple[Context, Keymap]:
    """Resolve settings and build the context and keymap.

    Every settings problem surfaces here as an exception, before the
    terminal is touched.
    """
    config = load_config(options.rcfile)
    if options.prompt:
        config.prompt = options.prompt
    if options.initial_filter:
        config.initial_filter = options.initial_filter
    if options.theme:
        config.theme = options.theme

    ctx = Context(
        ContextOptions(
            enable_null_sep=options.enable_null_sep,
            buffer_size=options.buffer_size,
            initial_index=options.initial_index,
            layout_type=options.layout,
        ),
        config,
    )
    ctx.apply_config(config, layout_override=options.layout)
    keymap = Keymap(config)
    return ctx, keymap


def run_session(source: IO, options: SessionOptions) -> SessionResult:
    ctx, keymap = build_context(options)

    ctx.spawn_loop(ReaderLoop(ctx, source).loop, "reader")
    ctx.input_ready.wait()

    try:
        terminal = TerminalController(options.tty_path)
    except OSError as exc:
        logger.debug("cannot open %s: %s", options.tty_path, exc)
        ctx.exit_with(exc)
        return SessionResult(None, ctx.wait_done())

    signals = SignalHandler(ctx)
    if threading.current_thread() is threading.main_thread():
        signals.install()
    try:
        with terminal.raw_mode():
            view = View(ctx, terminal.write, terminal.size, resolve_theme(ctx.config.theme))
            ctx.spawn_loop(StreamWatcher(ctx).loop, "stream-watcher")
            ctx.spawn_loop(view.loop, "view")
            ctx.spawn_loop(FilterLoop(ctx).loop, "filter")
            ctx.spawn_loop(Input(ctx, KeyReader(terminal.fd), keymap).loop, "input")
            ctx.spawn_loop(signals.loop, "signal")

            if options.query:
                ctx.set_query(options.query)
                ctx.exec_query()
            else:
                ctx.send_draw()

            err = ctx.wait_done()
    finally:
        signals.restore()
        terminal.close()

    logger.debug("session done: error=%r", err)
    if err is not None:
        return SessionResult(None, err)
    return SessionResult(ctx.result_lines())


__all__ = [
    "SessionOptions",
    "SessionResult",
    "TRACE_ENV",
    "build_context",
    "configure_logging",
    "run_session",
]

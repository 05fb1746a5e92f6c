"""Keyboard loop: reads key names from the tty and dispatches them."""

from __future__ import annotations

import logging

from .context import Context
from .keymap import Keymap
from .keys import KeyReader

logger = logging.getLogger(__name__)

INPUT_POLL_MS = 100


class Input:
    def __init__(
        self,
        ctx: Context,
        key_reader: KeyReader,
        keymap: Keymap,
        poll_ms: int = INPUT_POLL_MS,
    ) -> None:
        self.ctx = ctx
        self.key_reader = key_reader
        self.keymap = keymap
        self.poll_ms = poll_ms

    def handle_key(self, key: str) -> bool:
        handled = self.keymap.dispatch(self.ctx, key)
        if not handled:
            logger.debug("input: unbound key %r", key)
        return handled

    def loop(self) -> None:
        ctx = self.ctx
        logger.debug("input loop: start")
        while not ctx.stopped():
            key = self.key_reader.read_key(timeout_ms=self.poll_ms)
            if not key or ctx.stopped():
                continue
            self.handle_key(key)
        logger.debug("input loop: stop")


__all__ = ["INPUT_POLL_MS", "Input"]

"""OS signal handling for the interactive session.

Handlers are installed from the main thread and only record the signal; the
handler loop, running on its own thread, turns it into a fatal stop.
"""

from __future__ import annotations

import logging
import signal
import threading
from queue import Empty, SimpleQueue

from .context import Context
from .errors import SignalReceived

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)
SIGNAL_POLL_SECONDS = 0.1


class SignalHandler:
    def __init__(self, ctx: Context, poll_seconds: float = SIGNAL_POLL_SECONDS) -> None:
        self.ctx = ctx
        self.poll_seconds = poll_seconds
        self._received: SimpleQueue[int] = SimpleQueue()
        self._previous: dict[int, object] = {}

    def install(self) -> None:
        """Register handlers; must run on the main thread."""
        if threading.current_thread() is not threading.main_thread():
            raise RuntimeError("signal handlers must be installed from the main thread")
        for signum in HANDLED_SIGNALS:
            self._previous[signum] = signal.signal(signum, self._on_signal)

    def restore(self) -> None:
        for signum, previous in self._previous.items():
            signal.signal(signum, previous)  # type: ignore[arg-type]
        self._previous.clear()

    def _on_signal(self, signum: int, _frame: object) -> None:
        self._received.put(signum)

    def notify(self, signum: int) -> None:
        """Deliver ``signum`` as if the OS had sent it."""
        self._received.put(signum)

    def loop(self) -> None:
        ctx = self.ctx
        while not ctx.stopped():
            try:
                signum = self._received.get(timeout=self.poll_seconds)
            except Empty:
                continue
            logger.debug("signal handler: got %d", signum)
            ctx.exit_with(SignalReceived(signum))
            return


__all__ = ["HANDLED_SIGNALS", "SignalHandler"]

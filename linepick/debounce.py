"""Rate-limited query dispatch.

At most one timer is in flight. Calls to ``arm`` while a timer is pending are
ignored rather than postponing it; when the timer fires it reads the query
text current at that moment, dispatches it, then clears the armed marker. If
the text changed during dispatch, the timer is armed again so the latest
text is always the last one sent.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class QueryDebouncer:
    def __init__(self, delay_seconds: float, dispatch: Callable[[str], None]) -> None:
        self.delay_seconds = delay_seconds
        self._dispatch = dispatch
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    @property
    def armed(self) -> bool:
        with self._lock:
            return self._timer is not None

    def arm(self, current_query: Callable[[], str]) -> bool:
        """Start the timer unless one is pending. Returns True if armed."""
        with self._lock:
            if self._timer is not None:
                return False
            timer = threading.Timer(self.delay_seconds, self._fire, args=(current_query,))
            timer.daemon = True
            self._timer = timer
        logger.debug("debounce: armed for %.3fs", self.delay_seconds)
        timer.start()
        return True

    def _fire(self, current_query: Callable[[], str]) -> None:
        try:
            query = current_query()
            logger.debug("debounce: firing %r", query)
            self._dispatch(query)
        finally:
            with self._lock:
                # A cancel followed by a new arm may have replaced us.
                owned = self._timer is threading.current_thread()
                if owned:
                    self._timer = None
        # Edits made while dispatching found the timer still armed.
        if owned and current_query() != query:
            self.arm(current_query)

    def cancel(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()


__all__ = ["QueryDebouncer"]

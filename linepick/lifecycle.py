"""Loop bookkeeping and the stop-and-drain protocol.

Every long-running loop registers with the ``JoinCounter`` before its thread
starts and releases its token when it returns. ``Lifecycle.request_stop``
records the first error it is given and broadcasts the hub stop exactly once;
``wait`` then blocks until all loops have released their tokens.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .errors import InternalError
from .hub import Hub

logger = logging.getLogger(__name__)

RUNNING = "running"
STOP_REQUESTED = "stop_requested"
DRAINED = "drained"


class JoinCounter:
    """Counter of running loops with a blocking ``wait`` for zero."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._count = 0

    def add(self, delta: int = 1) -> None:
        with self._cond:
            if self._count + delta < 0:
                raise ValueError("negative join counter")
            self._count += delta
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    def count(self) -> int:
        with self._cond:
            return self._count

    def wait(self, timeout: float | None = None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)


class Lifecycle:
    def __init__(self, hub: Hub) -> None:
        self._hub = hub
        self._lock = threading.Lock()
        self._state = RUNNING
        self._error: BaseException | None = None
        self._join = JoinCounter()

    @property
    def state(self) -> str:
        with self._lock:
            return self._state

    def error(self) -> BaseException | None:
        with self._lock:
            return self._error

    def add(self, delta: int = 1) -> None:
        self._join.add(delta)

    def release(self) -> None:
        self._join.done()

    def running_loops(self) -> int:
        return self._join.count()

    def request_stop(self, err: BaseException | None = None) -> bool:
        """Move to STOP_REQUESTED; only the first error is kept."""
        with self._lock:
            if err is not None and self._error is None:
                self._error = err
            if self._state == RUNNING:
                self._state = STOP_REQUESTED
        if err is not None:
            logger.debug("lifecycle: stop requested: %s", err)
        return self._hub.stop()

    def wait(self, timeout: float | None = None) -> BaseException | None:
        """Block until every registered loop has finished.

        Returns the recorded error (None on a clean exit). With a timeout that
        expires first, the state is left untouched and the current error is
        returned.
        """
        if self._join.wait(timeout):
            with self._lock:
                self._state = DRAINED
        return self.error()

    def spawn(self, target: Callable[[], None], name: str) -> threading.Thread:
        """Register and start ``target`` on a daemon thread.

        The join token is released when ``target`` returns; an unexpected
        exception is turned into a fatal stop instead of killing the thread
        silently.
        """
        self.add(1)

        def run() -> None:
            try:
                target()
            except Exception as exc:
                logger.exception("loop %s crashed", name)
                self.request_stop(InternalError(f"{name}: {exc}"))
            finally:
                self.release()

        worker = threading.Thread(target=run, name=name, daemon=True)
        worker.start()
        return worker


__all__ = ["DRAINED", "JoinCounter", "Lifecycle", "RUNNING", "STOP_REQUESTED"]

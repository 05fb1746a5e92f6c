"""Join counter and the stop-and-drain protocol."""

from __future__ import annotations

import signal
import threading
import unittest

from linepick.context import Context
from linepick.errors import InternalError, SignalReceived
from linepick.hub import Hub
from linepick.lifecycle import DRAINED, RUNNING, STOP_REQUESTED, JoinCounter, Lifecycle
from linepick.signals import SignalHandler


class JoinCounterTests(unittest.TestCase):
    def test_wait_returns_once_count_reaches_zero(self) -> None:
        counter = JoinCounter()
        counter.add(2)
        self.assertFalse(counter.wait(timeout=0.01))
        counter.done()
        counter.done()
        self.assertTrue(counter.wait(timeout=0.01))

    def test_negative_count_rejected(self) -> None:
        with self.assertRaises(ValueError):
            JoinCounter().done()


class LifecycleStateTests(unittest.TestCase):
    def test_states_progress_to_drained(self) -> None:
        hub = Hub()
        lifecycle = Lifecycle(hub)
        self.assertEqual(lifecycle.state, RUNNING)
        lifecycle.add()
        self.assertTrue(lifecycle.request_stop())
        self.assertEqual(lifecycle.state, STOP_REQUESTED)
        self.assertFalse(lifecycle.request_stop())
        lifecycle.release()
        self.assertIsNone(lifecycle.wait(timeout=1))
        self.assertEqual(lifecycle.state, DRAINED)

    def test_crashing_loop_becomes_internal_error(self) -> None:
        hub = Hub()
        lifecycle = Lifecycle(hub)

        def boom() -> None:
            raise RuntimeError("kaboom")

        lifecycle.spawn(boom, "boom")
        err = lifecycle.wait(timeout=2)
        self.assertIsInstance(err, InternalError)
        self.assertIn("kaboom", str(err))
        self.assertTrue(hub.stopped)


class SignalHandlerTests(unittest.TestCase):
    def test_signal_becomes_recorded_error(self) -> None:
        ctx = Context()
        handler = SignalHandler(ctx, poll_seconds=0.01)
        ctx.spawn_loop(handler.loop, "signal")
        handler.notify(signal.SIGTERM)
        err = ctx.wait_done(timeout=2)
        self.assertIsInstance(err, SignalReceived)
        self.assertEqual(err.signum, signal.SIGTERM)

    def test_loop_exits_on_stop_without_error(self) -> None:
        ctx = Context()
        handler = SignalHandler(ctx, poll_seconds=0.01)
        ctx.spawn_loop(handler.loop, "signal")
        ctx.stop()
        self.assertIsNone(ctx.wait_done(timeout=2))

    def test_install_requires_main_thread(self) -> None:
        handler = SignalHandler(Context())
        errors: list[BaseException] = []

        def install() -> None:
            try:
                handler.install()
            except RuntimeError as exc:
                errors.append(exc)

        worker = threading.Thread(target=install)
        worker.start()
        worker.join(timeout=2)
        self.assertEqual(len(errors), 1)

    def test_install_and_restore_previous_handlers(self) -> None:
        previous = signal.getsignal(signal.SIGTERM)
        handler = SignalHandler(Context())
        handler.install()
        try:
            self.assertNotEqual(signal.getsignal(signal.SIGTERM), previous)
        finally:
            handler.restore()
        self.assertEqual(signal.getsignal(signal.SIGTERM), previous)


if __name__ == "__main__":
    unittest.main()

"""Filter executor: installs results, discards stale runs, reports failures."""

from __future__ import annotations

import sys
import unittest
from unittest import mock

from linepick.buffer import FilteredBuffer
from linepick.config import Config
from linepick.context import Context
from linepick.filter_loop import FilterLoop, Supersession
from linepick.filters import ExternalCommandFilter


def _context(texts: list[str]) -> Context:
    ctx = Context(config=Config(query_execution_delay=0))
    for text in texts:
        ctx.add_raw_line(text)
    return ctx


class FilterLoopWorkTests(unittest.TestCase):
    def test_work_installs_matches(self) -> None:
        ctx = _context(["apple", "banana", "Apple Pie"])
        ctx.set_query("apple")
        buffer = FilterLoop(ctx).work("apple")
        self.assertIsNotNone(buffer)
        self.assertIs(ctx.current_line_buffer(), buffer)
        self.assertEqual([line.display_text() for line in buffer], ["apple", "Apple Pie"])

    def test_superseded_run_is_discarded(self) -> None:
        ctx = _context(["apple", "banana"])
        ctx.set_query("apple")
        ctx.hub.send_query("banana")
        self.assertIsNone(FilterLoop(ctx).work("apple"))
        self.assertFalse(ctx.is_filtered())

    def test_result_discarded_when_query_cleared_meanwhile(self) -> None:
        ctx = _context(["apple"])
        self.assertIsNone(FilterLoop(ctx).work("apple"))
        self.assertFalse(ctx.is_filtered())

    def test_query_cleared_right_before_install_keeps_store_visible(self) -> None:
        ctx = _context(["apple", "banana"])
        ctx.set_query("a")

        def clear_then_build(results, query):
            ctx.set_query("")
            ctx.exec_query()
            return FilteredBuffer(results, query)

        with mock.patch("linepick.filter_loop.FilteredBuffer", side_effect=clear_then_build):
            self.assertIsNone(FilterLoop(ctx).work("a"))

        self.assertEqual(ctx.query_string(), "")
        self.assertFalse(ctx.is_filtered())
        self.assertEqual(ctx.current_line_buffer().size(), 2)

    def test_query_cleared_after_install_restores_store(self) -> None:
        ctx = _context(["apple", "banana"])
        ctx.set_query("a")
        FilterLoop(ctx).work("a")
        self.assertTrue(ctx.is_filtered())

        ctx.set_query("")
        self.assertTrue(ctx.exec_query())

        self.assertFalse(ctx.is_filtered())

    def test_result_for_older_text_is_not_installed(self) -> None:
        ctx = _context(["apple", "apricot"])
        ctx.set_query("apr")
        self.assertIsNone(FilterLoop(ctx).work("ap"))
        self.assertFalse(ctx.is_filtered())

    def test_empty_query_resets_filtered_view(self) -> None:
        ctx = _context(["apple", "banana"])
        ctx.set_query("apple")
        loop = FilterLoop(ctx)
        loop.work("apple")
        ctx.set_query("")
        loop.work("")
        self.assertFalse(ctx.is_filtered())

    def test_external_failure_reports_status_and_shows_no_matches(self) -> None:
        ctx = _context(["apple"])
        script = "import sys\nsys.stdin.read()\nsys.stderr.write('broken\\n')\nsys.exit(2)\n"
        ctx.filters.add(ExternalCommandFilter("Broken", sys.executable, ["-c", script]))
        ctx.set_current_filter_by_name("Broken")
        ctx.set_query("apple")

        buffer = FilterLoop(ctx).work("apple")

        self.assertEqual(buffer.size(), 0)
        message = ctx.hub.receive_status_msg(timeout=0)
        self.assertIn("broken", message.text)
        self.assertFalse(ctx.stopped())


class FilterLoopThreadTests(unittest.TestCase):
    def test_loop_processes_dispatched_query_and_stops(self) -> None:
        ctx = _context(["apple", "banana"])
        ctx.set_query("ban")
        ctx.spawn_loop(FilterLoop(ctx, poll_seconds=0.01).loop, "filter")
        ctx.exec_query()

        self.assertIsNotNone(ctx.hub.receive_draw(timeout=2))
        ctx.stop()
        self.assertIsNone(ctx.wait_done(timeout=2))
        self.assertEqual([line.display_text() for line in ctx.current_line_buffer()], ["banana"])

    def test_supersession_trips_on_stop(self) -> None:
        ctx = _context([])
        token = Supersession(ctx.hub)
        self.assertFalse(token.is_set())
        ctx.stop()
        self.assertTrue(token.is_set())


if __name__ == "__main__":
    unittest.main()

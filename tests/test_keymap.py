"""Key bindings and the actions they run against the context."""

from __future__ import annotations

import os
import unittest

from linepick import actions
from linepick.config import Config
from linepick.context import Context
from linepick.errors import ConfigError
from linepick.filter_loop import FilterLoop
from linepick.filters import CASE_SENSITIVE, IGNORE_CASE
from linepick.hub import PAGING_DOWN, PAGING_NEXT_PAGE, PAGING_UP
from linepick.input_loop import Input
from linepick.keymap import DEFAULT_BINDINGS, Keymap, is_printable_key
from linepick.keys import KeyReader


def _context(texts: list[str]) -> Context:
    ctx = Context(config=Config(query_execution_delay=0))
    for text in texts:
        ctx.add_raw_line(text)
    return ctx


class KeymapTests(unittest.TestCase):
    def test_defaults_resolve_to_registered_actions(self) -> None:
        keymap = Keymap()
        for key, name in DEFAULT_BINDINGS.items():
            self.assertEqual(keymap.lookup(key).action_name, f"linepick.{name}")

    def test_config_overrides_and_unbinds(self) -> None:
        keymap = Keymap(Config(keymap={"C-j": "linepick.Finish", "C-r": "-"}))
        self.assertEqual(keymap.lookup("C-j").action_name, "linepick.Finish")
        self.assertIsNone(keymap.lookup("C-r"))

    def test_unknown_action_is_config_error(self) -> None:
        with self.assertRaises(ConfigError):
            Keymap(Config(keymap={"C-j": "linepick.Nope"}))

    def test_combined_action_runs_steps_in_order(self) -> None:
        ctx = _context(["a"])
        keymap = Keymap(
            Config(
                action={"my.DownTwice": ["linepick.SelectDown", "linepick.SelectDown"]},
                keymap={"C-j": "my.DownTwice"},
            )
        )
        self.assertTrue(keymap.dispatch(ctx, "C-j"))
        self.assertEqual(ctx.hub.receive_paging(timeout=0).kind, PAGING_DOWN)
        self.assertEqual(ctx.hub.receive_paging(timeout=0).kind, PAGING_DOWN)

    def test_combined_action_with_unknown_step_fails(self) -> None:
        with self.assertRaises(ConfigError):
            Keymap(Config(action={"my.Bad": ["linepick.Nope"]}))

    def test_printable_key_detection(self) -> None:
        self.assertTrue(is_printable_key("a"))
        self.assertTrue(is_printable_key("漢"))
        self.assertFalse(is_printable_key("C-a"))
        self.assertFalse(is_printable_key("\x01"))


class EditingActionTests(unittest.TestCase):
    def test_typing_edits_query_and_dispatches(self) -> None:
        ctx = _context(["apple"])
        keymap = Keymap()
        for key in "ap":
            keymap.dispatch(ctx, key)
        self.assertEqual(ctx.query_string(), "ap")
        self.assertEqual(ctx.hub.receive_query(timeout=0), "ap")
        self.assertTrue(ctx.hub.receive_draw_prompt(timeout=0))

    def test_caret_keys(self) -> None:
        ctx = _context([])
        ctx.set_query("abc")
        keymap = Keymap()
        keymap.dispatch(ctx, "C-a")
        self.assertEqual(ctx.caret_pos(), 0)
        keymap.dispatch(ctx, "Right")
        self.assertEqual(ctx.caret_pos(), 1)
        keymap.dispatch(ctx, "End")
        self.assertEqual(ctx.caret_pos(), 3)
        keymap.dispatch(ctx, "C-b")
        self.assertEqual(ctx.caret_pos(), 2)

    def test_deleting_last_char_restores_raw_view(self) -> None:
        ctx = _context(["apple", "pear"])
        keymap = Keymap()
        keymap.dispatch(ctx, "a")
        FilterLoop(ctx).work(ctx.hub.receive_query(timeout=0))
        self.assertTrue(ctx.is_filtered())
        keymap.dispatch(ctx, "BS")
        self.assertFalse(ctx.is_filtered())

    def test_toggle_query_stashes_and_restores(self) -> None:
        ctx = _context(["apple", "pear"])
        ctx.set_query("ap")
        FilterLoop(ctx).work("ap")
        keymap = Keymap()

        keymap.dispatch(ctx, "C-t")
        self.assertEqual(ctx.query_string(), "")
        self.assertFalse(ctx.is_filtered())

        keymap.dispatch(ctx, "C-t")
        self.assertEqual(ctx.query_string(), "ap")
        self.assertEqual(ctx.hub.receive_query(timeout=0), "ap")

    def test_kill_and_word_delete(self) -> None:
        ctx = _context([])
        ctx.set_query("foo bar")
        keymap = Keymap()
        keymap.dispatch(ctx, "C-w")
        self.assertEqual(ctx.query_string(), "foo ")
        keymap.dispatch(ctx, "C-a")
        keymap.dispatch(ctx, "C-k")
        self.assertEqual(ctx.query_string(), "")


class SelectionActionTests(unittest.TestCase):
    def test_cursor_keys_send_paging(self) -> None:
        ctx = _context(["a", "b"])
        keymap = Keymap()
        keymap.dispatch(ctx, "Down")
        keymap.dispatch(ctx, "C-p")
        keymap.dispatch(ctx, "Pgdn")
        kinds = [ctx.hub.receive_paging(timeout=0).kind for _ in range(3)]
        self.assertEqual(kinds, [PAGING_DOWN, PAGING_UP, PAGING_NEXT_PAGE])

    def test_toggle_selection_and_select_next(self) -> None:
        ctx = _context(["a", "b"])
        keymap = Keymap()
        keymap.dispatch(ctx, "C-Space")
        self.assertTrue(ctx.selection_contains(0))
        self.assertEqual(ctx.hub.receive_paging(timeout=0).kind, PAGING_DOWN)
        keymap.dispatch(ctx, "C-Space")
        self.assertFalse(ctx.selection_contains(0))

    def test_range_mode_toggle_materializes(self) -> None:
        ctx = _context(["a", "b", "c", "d"])
        keymap = Keymap()
        ctx.set_current_line(1)
        keymap.dispatch(ctx, "C-v")
        self.assertTrue(ctx.is_range_mode())
        ctx.set_current_line(2)
        keymap.dispatch(ctx, "C-v")
        self.assertFalse(ctx.is_range_mode())
        self.assertEqual([line.text for line in ctx.selected_lines()], ["b", "c"])

    def test_cancel_range_mode_discards(self) -> None:
        ctx = _context(["a", "b", "c"])
        keymap = Keymap()
        keymap.dispatch(ctx, "C-v")
        ctx.set_current_line(2)
        keymap.dispatch(ctx, "C-g")
        self.assertFalse(ctx.is_range_mode())
        self.assertEqual(ctx.selection_len(), 0)

    def test_rotate_filter_reruns_query(self) -> None:
        ctx = _context(["a"])
        ctx.set_query("a")
        Keymap().dispatch(ctx, "C-r")
        self.assertEqual(ctx.filter().name, CASE_SENSITIVE)
        self.assertEqual(ctx.hub.receive_query(timeout=0), "a")

    def test_select_all_none_invert(self) -> None:
        ctx = _context(["a", "b", "c"])
        actions.ACTIONS["linepick.SelectAll"](ctx)
        self.assertEqual(ctx.selection_len(), 3)
        ctx.selection_remove(1)
        actions.ACTIONS["linepick.InvertSelection"](ctx)
        self.assertEqual([line.text for line in ctx.selected_lines()], ["b"])
        actions.ACTIONS["linepick.SelectNone"](ctx)
        self.assertEqual(ctx.selection_len(), 0)


class FinishCancelTests(unittest.TestCase):
    def test_finish_with_empty_selection_takes_cursor_row(self) -> None:
        ctx = _context(["a", "b"])
        ctx.set_current_line(1)
        Keymap().dispatch(ctx, "Enter")
        self.assertTrue(ctx.stopped())
        self.assertIsNone(ctx.error())
        self.assertEqual([line.text for line in ctx.result_lines()], ["b"])

    def test_finish_materializes_active_range(self) -> None:
        ctx = _context(["a", "b", "c", "d"])
        keymap = Keymap()
        keymap.dispatch(ctx, "C-v")
        ctx.set_current_line(2)
        keymap.dispatch(ctx, "Enter")
        self.assertEqual([line.text for line in ctx.result_lines()], ["a", "b", "c"])

    def test_finish_keeps_explicit_selection(self) -> None:
        ctx = _context(["a", "b", "c"])
        ctx.selection_add(2)
        ctx.selection_add(0)
        Keymap().dispatch(ctx, "Enter")
        self.assertEqual([line.text for line in ctx.result_lines()], ["a", "c"])

    def test_cancel_stops_without_result(self) -> None:
        ctx = _context(["a"])
        Keymap().dispatch(ctx, "Esc")
        self.assertTrue(ctx.stopped())
        self.assertIsNone(ctx.result_lines())
        self.assertIsNone(ctx.error())
        self.assertEqual(ctx.filter().name, IGNORE_CASE)


class InputLoopTests(unittest.TestCase):
    def test_loop_dispatches_keys_until_finish(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            ctx = _context(["apple", "banana"])
            loop = Input(ctx, KeyReader(read_fd), Keymap(), poll_ms=10)
            ctx.spawn_loop(loop.loop, "input")
            os.write(write_fd, b"b\r")
            self.assertIsNone(ctx.wait_done(timeout=2))
            self.assertEqual(ctx.query_string(), "b")
            self.assertIsNotNone(ctx.result_lines())
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_unbound_key_is_reported_unhandled(self) -> None:
        ctx = _context([])
        self.assertFalse(Input(ctx, KeyReader(0), Keymap()).handle_key("M-z"))


if __name__ == "__main__":
    unittest.main()

"""Line store behavior: capacity bounds, positional access and replay."""

from __future__ import annotations

import unittest

from linepick.buffer import FilteredBuffer, RawLineBuffer
from linepick.errors import OutOfRangeError
from linepick.line import MatchedLine, RawLine


def _fill(buffer: RawLineBuffer, texts: list[str]) -> list[RawLine]:
    lines = [RawLine(idx, text) for idx, text in enumerate(texts)]
    for line in lines:
        buffer.append_line(line)
    return lines


class RawLineBufferTests(unittest.TestCase):
    def test_unbounded_size_counts_every_append(self) -> None:
        buffer = RawLineBuffer()
        _fill(buffer, [f"line {idx}" for idx in range(1000)])
        self.assertEqual(buffer.size(), 1000)
        self.assertEqual(len(buffer), 1000)

    def test_bounded_size_is_min_of_appends_and_capacity(self) -> None:
        for appends in (0, 1, 3, 4, 10, 25):
            buffer = RawLineBuffer(capacity=4)
            _fill(buffer, [str(idx) for idx in range(appends)])
            self.assertEqual(buffer.size(), min(appends, 4))

    def test_capacity_three_keeps_the_newest_lines(self) -> None:
        buffer = RawLineBuffer(capacity=3)
        _fill(buffer, ["one", "two", "three", "four", "five"])

        self.assertEqual(buffer.size(), 3)
        self.assertEqual(buffer.line_at(0).text, "three")
        self.assertEqual([line.text for line in buffer], ["three", "four", "five"])

    def test_eviction_keeps_positions_stable_across_compaction(self) -> None:
        buffer = RawLineBuffer(capacity=2)
        _fill(buffer, [str(idx) for idx in range(9)])
        self.assertEqual([buffer.line_at(idx).text for idx in range(buffer.size())], ["7", "8"])

    def test_line_at_in_range_and_out_of_range(self) -> None:
        buffer = RawLineBuffer()
        _fill(buffer, ["a", "b", "c"])
        for idx in range(3):
            self.assertEqual(buffer.line_at(idx).index, idx)
        for bad in (-1, 3, 100):
            with self.assertRaises(OutOfRangeError) as caught:
                buffer.line_at(bad)
            self.assertEqual(caught.exception.index, bad)
            self.assertEqual(caught.exception.size, 3)

    def test_out_of_range_is_also_an_index_error(self) -> None:
        buffer = RawLineBuffer()
        with self.assertRaises(IndexError):
            buffer.line_at(0)

    def test_append_notifies_output_queue(self) -> None:
        buffer = RawLineBuffer()
        lines = _fill(buffer, ["a", "b"])
        self.assertEqual(buffer.drain_output(), lines)
        self.assertEqual(buffer.drain_output(), [])

    def test_replay_emits_retained_lines_in_order(self) -> None:
        buffer = RawLineBuffer(capacity=3)
        lines = _fill(buffer, ["a", "b", "c", "d"])
        buffer.drain_output()

        count = buffer.replay()

        self.assertEqual(count, buffer.size())
        self.assertEqual(buffer.drain_output(), lines[1:])
        self.assertEqual(buffer.size(), 3)

    def test_set_capacity_shrinks_existing_store(self) -> None:
        buffer = RawLineBuffer()
        _fill(buffer, ["a", "b", "c", "d"])
        buffer.set_capacity(2)
        self.assertEqual(buffer.capacity, 2)
        self.assertEqual([line.text for line in buffer.snapshot()], ["c", "d"])


class FilteredBufferTests(unittest.TestCase):
    def test_positional_access_over_matches(self) -> None:
        matched = [MatchedLine(RawLine(4, "x"), ((0, 1),)), MatchedLine(RawLine(9, "xy"), ((0, 1),))]
        buffer = FilteredBuffer(matched, "x")
        self.assertEqual(buffer.size(), 2)
        self.assertEqual(buffer.line_at(1).id, 9)
        self.assertEqual(buffer.query, "x")
        with self.assertRaises(OutOfRangeError):
            buffer.line_at(2)


class LineTests(unittest.TestCase):
    def test_null_separated_line_splits_display_and_output(self) -> None:
        line = RawLine(0, "shown\0printed", enable_sep=True)
        self.assertEqual(line.display_text(), "shown")
        self.assertEqual(line.output(), "printed")

    def test_separator_ignored_when_disabled(self) -> None:
        line = RawLine(0, "shown\0printed")
        self.assertEqual(line.display_text(), "shown\0printed")
        self.assertEqual(line.output(), "shown\0printed")

    def test_matched_line_shares_identity_with_raw(self) -> None:
        raw = RawLine(7, "text")
        matched = MatchedLine(raw, ((1, 3),))
        self.assertEqual(matched.id, raw.id)
        self.assertEqual(matched.indices(), ((1, 3),))
        self.assertEqual(raw.indices(), ())


if __name__ == "__main__":
    unittest.main()

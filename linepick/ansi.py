"""Display-width aware row shaping.

Rows are built from plain line text plus highlight ranges; styling escapes
are inserted at range boundaries and never count toward the width.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Sequence

TAB_STOP = 8
RESET = "\033[0m"


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    col = 0
    for ch in text:
        col += char_display_width(ch, col)
    return col


def _printable(ch: str) -> str:
    # Raw control bytes would move the terminal cursor.
    if ch != "\t" and (ord(ch) < 0x20 or ord(ch) == 0x7F):
        return "?"
    return ch


def styled_row(
    text: str,
    ranges: Sequence[tuple[int, int]],
    max_cols: int,
    base_sgr: str = "",
    match_sgr: str = "",
) -> str:
    """Clip ``text`` to ``max_cols`` columns and highlight ``ranges``.

    The row is padded with spaces to the full width so a background colour in
    ``base_sgr`` covers the whole row.
    """
    if max_cols <= 0:
        return ""
    out: list[str] = [RESET, base_sgr]
    col = 0
    range_idx = 0
    in_match = False
    for pos, raw_ch in enumerate(text):
        while range_idx < len(ranges) and pos >= ranges[range_idx][1]:
            range_idx += 1
        want_match = bool(match_sgr) and range_idx < len(ranges) and ranges[range_idx][0] <= pos
        if want_match != in_match:
            out.append(match_sgr if want_match else RESET + base_sgr)
            in_match = want_match
        ch = _printable(raw_ch)
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
    if in_match:
        out.append(RESET + base_sgr)
    if col < max_cols:
        out.append(" " * (max_cols - col))
    out.append(RESET)
    return "".join(out)


def clip_text(text: str, max_cols: int) -> str:
    """Plain-text clip to ``max_cols`` display columns."""
    out: list[str] = []
    col = 0
    for raw_ch in text:
        ch = _printable(raw_ch)
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
    return "".join(out)


__all__ = ["RESET", "char_display_width", "clip_text", "display_width", "styled_row"]

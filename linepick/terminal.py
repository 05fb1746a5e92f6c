"""Terminal control for the interactive session.

The session draws to and reads keys from the controlling tty rather than
stdin/stdout: stdin usually carries the lines being filtered and stdout is
reserved for the selected output.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty

DEFAULT_TTY_PATH = "/dev/tty"


class TerminalController:
    """Own the tty descriptor and its raw/alternate-screen lifecycle."""

    def __init__(self, tty_path: str = DEFAULT_TTY_PATH) -> None:
        """Open ``tty_path`` read/write and capture its current mode."""
        self.tty_path = tty_path
        self.fd = os.open(tty_path, os.O_RDWR | os.O_NOCTTY)
        self._saved_tty_state = termios.tcgetattr(self.fd)
        self._tui_enabled = False

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.fd, termios.TCSAFLUSH)
        # Enter alternate screen and hide cursor.
        os.write(self.fd, b"\x1b[?1049h\x1b[?25l")
        self._tui_enabled = True

    def disable_tui_mode(self) -> None:
        """Restore the main screen buffer and the saved tty mode."""
        if not self._tui_enabled:
            return
        # Show cursor and restore the main screen buffer.
        os.write(self.fd, b"\x1b[?25h\x1b[?1049l")
        self._tui_enabled = False
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._saved_tty_state)

    def size(self) -> tuple[int, int]:
        """Return ``(columns, lines)``, defaulting to 80x24 when unknown."""
        try:
            size = os.get_terminal_size(self.fd)
        except OSError:
            return 80, 24
        return max(1, size.columns), max(1, size.lines)

    def write(self, payload: str) -> None:
        data = payload.encode("utf-8", errors="replace")
        while data:
            written = os.write(self.fd, data)
            data = data[written:]

    def close(self) -> None:
        self.disable_tui_mode()
        os.close(self.fd)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield self
        finally:
            self.disable_tui_mode()


__all__ = ["DEFAULT_TTY_PATH", "TerminalController"]

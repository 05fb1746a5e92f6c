"""Low-level terminal input decoding.

Reads raw bytes from the tty and translates them into normalized key names
(``C-a``, ``Up``, ``Enter``...) or the printable character itself. The names
are what rc-file ``Keymap`` entries refer to.
"""

from __future__ import annotations

import codecs
import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25

_CONTROL_NAMES = {
    b"\x00": "C-Space",
    b"\t": "Tab",
    b"\r": "Enter",
    b"\n": "C-j",
    b"\x08": "BS",
    b"\x7f": "BS",
    b"\x1f": "C-_",
}

_CSI_FINAL = {
    b"A": "Up",
    b"B": "Down",
    b"C": "Right",
    b"D": "Left",
    b"H": "Home",
    b"F": "End",
}

_CSI_TILDE = {
    b"1": "Home",
    b"2": "Insert",
    b"3": "Delete",
    b"4": "End",
    b"5": "Pgup",
    b"6": "Pgdn",
    b"7": "Home",
    b"8": "End",
}


class KeyReader:
    """Stateful decoder; keeps bytes read ahead while probing escape sequences."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._pending: list[bytes] = []

    def _read_ready_byte(self, timeout_ms: int) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
        ch = os.read(self.fd, 1)
        if not ch:
            return None
        return ch

    def _read_utf8(self, first: bytes) -> str:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        text = decoder.decode(first)
        while not text:
            nxt = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                return decoder.decode(b"", final=True)
            text = decoder.decode(nxt)
        return text

    def read_key(self, timeout_ms: int | None = None) -> str:
        """Return the next key name, or "" when ``timeout_ms`` expires."""
        if self._pending:
            ch = self._pending.pop(0)
        else:
            if timeout_ms is not None:
                ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
                if not ready:
                    return ""
            ch = os.read(self.fd, 1)
            if not ch:
                return ""

        if ch in _CONTROL_NAMES:
            return _CONTROL_NAMES[ch]
        if ch != b"\x1b":
            code = ch[0]
            if code < 0x20:
                return f"C-{chr(code + 0x60)}"
            return self._read_utf8(ch)

        seq = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "Esc"
        if seq not in {b"[", b"O"}:
            if seq == b"\x1b":
                self._pending.append(seq)
                return "Esc"
            if seq[0] >= 0x20:
                return f"M-{self._read_utf8(seq)}"
            self._pending.append(seq)
            return "Esc"

        final = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "Esc"
        if final in _CSI_FINAL:
            return _CSI_FINAL[final]
        if final in _CSI_TILDE:
            tail = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if tail == b"~":
                return _CSI_TILDE[final]
        return "Esc"


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "KeyReader"]

"""Filter strategy that delegates matching to an external command.

Candidates are written to the command's stdin, one display text per line, and
every stdout line is taken as a match. Up to ``threshold`` candidates go to a
single invocation; larger inputs are fed through successive invocations of
``threshold`` lines each, so results stream back chunk by chunk in source
order. Output lines are mapped back to the candidate with the same text so
selection identity survives; text the command invents becomes a new line with
a negative id.
"""

from __future__ import annotations

import itertools
import logging
import subprocess
from collections import defaultdict, deque
from collections.abc import Iterable, Iterator, Sequence

from ..errors import ExternalFilterError
from ..line import Line, MatchedLine, RawLine, raw_of
from .base import CancelToken, QueryFilter

logger = logging.getLogger(__name__)

QUERY_PLACEHOLDER = "$QUERY"
DEFAULT_BUFFER_THRESHOLD = 100

_synthetic_ids = itertools.count(-1, -1)


def expand_args(args: Sequence[str], query: str) -> list[str]:
    """Substitute ``$QUERY`` in ``args``; append the query if absent."""
    if not any(QUERY_PLACEHOLDER in arg for arg in args):
        return [*args, query]
    return [arg.replace(QUERY_PLACEHOLDER, query) for arg in args]


class ExternalCommandFilter(QueryFilter):
    def __init__(
        self,
        name: str,
        cmd: str,
        args: Sequence[str] = (),
        threshold: int = DEFAULT_BUFFER_THRESHOLD,
        enable_sep: bool = False,
        timeout: float | None = None,
    ) -> None:
        self.name = name
        self.cmd = cmd
        self.args = tuple(args)
        self.threshold = threshold if threshold > 0 else DEFAULT_BUFFER_THRESHOLD
        self.enable_sep = enable_sep
        self.timeout = timeout

    def command_for(self, query: str) -> list[str]:
        return [self.cmd, *expand_args(self.args, query)]

    def _run_chunk(self, command: list[str], chunk: Sequence[Line]) -> list[str]:
        payload = "".join(f"{line.display_text()}\n" for line in chunk)
        try:
            proc = subprocess.run(
                command,
                input=payload,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise ExternalFilterError(f"{self.name}: failed to run {self.cmd}: {exc}") from exc

        stderr_text = (proc.stderr or "").strip()
        if proc.returncode != 0 and not proc.stdout and stderr_text:
            raise ExternalFilterError(f"{self.name}: {stderr_text.splitlines()[0]}")
        return proc.stdout.splitlines()

    def _map_back(self, chunk: Sequence[Line], outputs: list[str]) -> Iterator[MatchedLine]:
        by_text: defaultdict[str, deque[RawLine]] = defaultdict(deque)
        for line in chunk:
            raw = raw_of(line)
            by_text[raw.display_text()].append(raw)
        for text in outputs:
            candidates = by_text.get(text)
            if candidates:
                yield MatchedLine(candidates.popleft())
                continue
            yield MatchedLine(RawLine(next(_synthetic_ids), text, self.enable_sep))

    def apply(
        self,
        query: str,
        lines: Iterable[Line],
        cancel: CancelToken | None = None,
    ) -> Iterator[MatchedLine]:
        candidates = list(lines)
        command = self.command_for(query)
        logger.debug(
            "external filter %s: %d candidates, threshold %d", self.name, len(candidates), self.threshold
        )
        for start in range(0, len(candidates), self.threshold):
            if cancel is not None and cancel.is_set():
                return
            chunk = candidates[start : start + self.threshold]
            outputs = self._run_chunk(command, chunk)
            yield from self._map_back(chunk, outputs)


__all__ = [
    "DEFAULT_BUFFER_THRESHOLD",
    "ExternalCommandFilter",
    "QUERY_PLACEHOLDER",
    "expand_args",
]

"""Command-line front door for linepick.

Parses options, resolves the line source, runs one interactive session, and
prints the selected lines to stdout.
"""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path

from . import __version__
from .app import SessionOptions, configure_logging, run_session
from .config import LAYOUT_TYPES
from .errors import LinepickError, SignalReceived
from .terminal import DEFAULT_TTY_PATH
from .ui_theme import available_theme_names

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_SIGNAL_BASE = 128


def _non_negative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linepick",
        description="Interactively filter lines from a file or stdin and print the chosen ones.",
    )
    parser.add_argument("file", nargs="?", default=None, help="Read lines from FILE instead of stdin.")
    parser.add_argument("--query", default="", help="Initial query.")
    parser.add_argument("--rcfile", type=Path, default=None, help="Path to the JSON settings file.")
    parser.add_argument(
        "-b",
        "--buffer-size",
        type=_non_negative_int,
        default=0,
        help="Keep at most this many lines (0 means unlimited).",
    )
    parser.add_argument(
        "--null",
        action="store_true",
        help="Lines are 'display<NUL>output'; match on display, print output.",
    )
    parser.add_argument(
        "--initial-index",
        type=_non_negative_int,
        default=0,
        help="Row the cursor starts on.",
    )
    parser.add_argument("--initial-filter", default="", help="Filter to start with.")
    parser.add_argument("--initial-matcher", default="", help=argparse.SUPPRESS)
    parser.add_argument("--prompt", default="", help="Prompt text.")
    parser.add_argument("--layout", default="", choices=("", *LAYOUT_TYPES), help="Screen layout.")
    parser.add_argument("--tty", default=DEFAULT_TTY_PATH, help="Terminal device to draw on.")
    parser.add_argument("--trace", metavar="FILE", default=None, help="Write a debug trace to FILE.")
    parser.add_argument(
        "--theme",
        default="",
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--version", action="store_true", help="Print the version and exit.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the session and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        sys.stderr.write(f"linepick: {__version__}\n")
        return EXIT_OK

    configure_logging(args.trace)

    if args.file is not None:
        path = Path(args.file)
        if not path.is_file():
            sys.stderr.write(f"linepick: file not found: {path}\n")
            return EXIT_ERROR
        source = path.open("rb")
    elif not sys.stdin.isatty():
        source = sys.stdin.buffer
    else:
        parser.error("no input: pass FILE or pipe lines on stdin")

    options = SessionOptions(
        query=args.query,
        rcfile=args.rcfile,
        buffer_size=args.buffer_size,
        enable_null_sep=args.null,
        initial_index=args.initial_index,
        initial_filter=args.initial_filter or args.initial_matcher,
        prompt=args.prompt,
        layout=args.layout,
        tty_path=args.tty,
        theme=args.theme,
    )

    try:
        result = run_session(source, options)
    except KeyboardInterrupt:
        return EXIT_SIGNAL_BASE + signal.SIGINT
    except (LinepickError, OSError) as exc:
        sys.stderr.write(f"linepick: {exc}\n")
        return EXIT_ERROR
    finally:
        if source is not sys.stdin.buffer:
            source.close()

    if result.error is not None:
        if isinstance(result.error, SignalReceived):
            return EXIT_SIGNAL_BASE + result.error.signum
        sys.stderr.write(f"linepick: {result.error}\n")
        return EXIT_ERROR

    for line in result.lines or ():
        text = line.output()
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
    sys.stdout.flush()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())

"""Module entrypoint for ``python -m linepick``.

All argument parsing and session setup happen in ``linepick.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())

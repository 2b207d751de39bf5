"""Module entrypoint for ``python -m lazymarks``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing and subcommand dispatch happen in ``lazymarks.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())

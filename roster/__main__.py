"""
Module entrypoint for the Roster CLI.

This file exists so that `python -m roster ...` works even when the
console-script wrapper is not installed. It contains no logic of its own.
"""

from __future__ import annotations

from roster.cli import main


def _run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    _run()

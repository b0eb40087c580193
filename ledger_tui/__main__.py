"""Module entry point for running the ledger via ``python -m ledger_tui``.

:func:`ledger_tui.cli.main` expects the ``stdscr`` window, so it is run under
:func:`curses.wrapper`, which also restores the terminal on exit or error.
"""

import curses

from .cli import main


def entry_point() -> None:
    """Wrap the CLI ``main`` function in a curses session."""
    curses.wrapper(main)


if __name__ == "__main__":  # pragma: no cover - manual execution entry
    entry_point()

"""Terminal ledger with monthly recurring entries."""

__version__ = "0.1.0"

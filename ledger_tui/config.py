"""Runtime configuration for the ledger.

Settings come from an optional JSON file plus a few environment variables::

    {
      "currency": "$",
      "tags": ["food", "travel", "other"],
      "confirm_quit": false,
      "log_level": "INFO"
    }

Each key falls back to its default independently when missing or of the
wrong type.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CURRENCY = "₹"
DEFAULT_TAGS = ("food", "travel", "shopping", "bills", "salary", "other")


class ConfigError(Exception):
    """Raised when the config file exists but cannot be parsed."""


def data_dir() -> Path:
    """Directory holding the database, config and log file."""
    return Path(os.getenv("LEDGER_HOME", Path.home() / ".ledger_tui"))


def config_path() -> Path:
    env = os.getenv("LEDGER_CONFIG")
    return Path(env) if env else data_dir() / "config.json"


def log_path() -> Path:
    env = os.getenv("LEDGER_LOG_FILE")
    return Path(env) if env else data_dir() / "ledger.log"


@dataclass
class Settings:
    currency: str = DEFAULT_CURRENCY
    tags: tuple[str, ...] = field(default_factory=lambda: DEFAULT_TAGS)
    confirm_quit: bool = False
    log_level: str | None = None

    @staticmethod
    def load(path: str | Path | None = None) -> "Settings":
        """Load settings from ``path`` (or the default location).

        A missing file yields the defaults; invalid JSON raises
        :class:`ConfigError`.
        """

        p = Path(path) if path is not None else config_path()
        settings = Settings()
        if not p.exists():
            return settings

        try:
            with p.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"cannot read config {p}: {exc}") from exc

        if not isinstance(raw, dict):
            return settings
        if isinstance(raw.get("currency"), str):
            settings.currency = raw["currency"]
        if isinstance(raw.get("tags"), list):
            settings.tags = tuple(str(t) for t in raw["tags"] if t is not None)
        if isinstance(raw.get("confirm_quit"), bool):
            settings.confirm_quit = raw["confirm_quit"]
        if isinstance(raw.get("log_level"), str):
            settings.log_level = raw["log_level"]
        return settings

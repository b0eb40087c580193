"""Keep tests away from the user's real ledger, config and log file."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

# database.py builds its engine at import time
os.environ.setdefault(
    "LEDGER_DB", os.path.join(tempfile.mkdtemp(prefix="ledger-tests-"), "ledger.db")
)


@pytest.fixture(autouse=True)
def _isolate_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("LEDGER_HOME", os.fspath(home))
    monkeypatch.delenv("LEDGER_CONFIG", raising=False)
    monkeypatch.delenv("LEDGER_LOG_FILE", raising=False)
    monkeypatch.delenv("LEDGER_LOG_LEVEL", raising=False)


@pytest.fixture
def store():
    from tests.helpers import make_store

    store, path = make_store()
    yield store
    path.unlink()

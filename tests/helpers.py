import os
import sys
import tempfile
from datetime import date
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure the project root is on the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from ledger_tui import database
from ledger_tui.app import App
from ledger_tui.store import LedgerStore
from ledger_tui.tags import TagVocabulary

TAGS = ("food", "travel", "other")


def get_temp_session():
    db_fd, db_path = tempfile.mkstemp()
    os.close(db_fd)
    engine = create_engine(f"sqlite:///{db_path}", future=True)
    TestingSession = sessionmaker(bind=engine)
    database.Base.metadata.create_all(engine)
    return TestingSession, Path(db_path)


def make_store():
    Session, path = get_temp_session()
    return LedgerStore(Session), path


class Clock:
    """Settable stand-in for ``date.today``."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


def make_app(store, tags=TAGS, today=date(2025, 6, 15), **kwargs) -> App:
    app = App(store, TagVocabulary(tags), currency="$", clock=Clock(today), **kwargs)
    app.refresh()
    return app


class Answer:
    """Mimics the object returned by questionary prompts."""

    def __init__(self, value):
        self.value = value

    def ask(self):
        return self.value


def make_questions(responses):
    iterator = iter(responses)

    def _question(*args, **kwargs):
        return Answer(next(iterator))

    return _question

import os
from pathlib import Path
from sqlalchemy import create_engine, text, inspect
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import data_dir

# Determine database path; allow override with environment variable for testing
DB_FILE = os.getenv("LEDGER_DB", None)
if DB_FILE is None:
    DB_FILE = data_dir() / "ledger.db"
else:
    DB_FILE = Path(DB_FILE)

engine = create_engine(f"sqlite:///{DB_FILE}", echo=False, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


def init_db() -> None:
    """Create database tables if they do not exist and upgrade old schemas."""
    from . import models  # noqa: F401

    db_name = engine.url.database
    if db_name and db_name != ":memory:":
        Path(db_name).parent.mkdir(parents=True, exist_ok=True)

    insp = inspect(engine)
    required = {"transactions", "recurring_entries"}
    existing = set(insp.get_table_names())
    if not required.issubset(existing):
        Base.metadata.create_all(engine)

    SessionLocal.configure(bind=engine)

    with engine.begin() as conn:
        # Early databases had no way to pause a recurring entry
        cols = [r[1] for r in conn.execute(text("PRAGMA table_info(recurring_entries)"))]
        if "active" not in cols:
            conn.execute(
                text(
                    "ALTER TABLE recurring_entries ADD COLUMN active BOOLEAN NOT NULL DEFAULT 1"
                )
            )
        if "last_inserted_month" not in cols:
            conn.execute(
                text(
                    "ALTER TABLE recurring_entries ADD COLUMN last_inserted_month VARCHAR NOT NULL DEFAULT ''"
                )
            )
        conn.execute(
            text("CREATE INDEX IF NOT EXISTS ix_transactions_date ON transactions(date)")
        )

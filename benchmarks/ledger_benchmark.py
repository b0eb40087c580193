import os
import time
import tempfile
from datetime import date
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from ledger_tui import database
from ledger_tui.models import Kind, RecurringEntry, Transaction
from ledger_tui.stats import compute_stats
from ledger_tui.store import LedgerStore

TAGS = ["food", "travel", "shopping", "bills", "salary", "other"]


def build_store(n_txns: int, n_recurring: int):
    db_fd, db_path = tempfile.mkstemp()
    os.close(db_fd)
    engine = create_engine(f"sqlite:///{db_path}", future=True)
    database.Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    session.add_all(
        Transaction(
            source=f"T{i}",
            amount=float(i % 100),
            kind=(Kind.CREDIT if i % 10 == 0 else Kind.DEBIT).value,
            tag=TAGS[i % len(TAGS)],
            date=f"2024-{i % 12 + 1:02d}-{i % 28 + 1:02d}",
        )
        for i in range(n_txns)
    )
    session.add_all(
        RecurringEntry(
            source=f"R{i}",
            amount=10.0,
            kind=Kind.DEBIT.value,
            tag=TAGS[i % len(TAGS)],
            last_inserted_month="",
            active=i % 5 != 0,
        )
        for i in range(n_recurring)
    )
    session.commit()
    session.close()
    return LedgerStore(Session), Path(db_path)


def run():
    store, path = build_store(20000, 500)
    try:
        start = time.perf_counter()
        txns = store.list_transactions()
        load_s = time.perf_counter() - start

        start = time.perf_counter()
        stats = compute_stats(txns)
        stats_s = time.perf_counter() - start

        start = time.perf_counter()
        first = store.materialize_recurring_for_month("2025-06", date(2025, 6, 1))
        second = store.materialize_recurring_for_month("2025-06", date(2025, 6, 1))
        sched_s = time.perf_counter() - start

        print(f"load {len(txns)} transactions: {load_s:.3f}s")
        print(f"stats ({len(stats.by_tag)} tags, balance {stats.balance:.2f}): {stats_s:.3f}s")
        print(f"scheduler: {first} then {second} materialized in {sched_s:.3f}s")
    finally:
        path.unlink()


if __name__ == "__main__":
    run()

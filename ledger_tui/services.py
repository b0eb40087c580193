from __future__ import annotations
from datetime import date

from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import RecurringEntry, Transaction

log = get_logger("ledger_tui.services")


def month_stamp(d: date) -> str:
    """Return the ``YYYY-MM`` stamp for ``d``."""
    return f"{d.year:04d}-{d.month:02d}"


def stale_recurring(session: Session, stamp: str) -> list[RecurringEntry]:
    """Active entries not yet materialized for ``stamp``."""
    return (
        session.query(RecurringEntry)
        .filter(RecurringEntry.active.is_(True))
        .filter(RecurringEntry.last_inserted_month != stamp)
        .order_by(RecurringEntry.id)
        .all()
    )


def materialize_entry(session: Session, entry: RecurringEntry, stamp: str, when: date) -> Transaction:
    txn = Transaction(
        source=entry.source,
        amount=entry.amount,
        kind=entry.kind,
        tag=entry.tag,
        date=when.isoformat(),
    )
    session.add(txn)
    stamp_entry(entry, stamp)
    return txn


def stamp_entry(entry: RecurringEntry, stamp: str) -> None:
    entry.last_inserted_month = stamp


def materialize_recurring_for_month(
    session: Session, stamp: str, today: date | None = None
) -> int:
    """Insert one transaction dated ``today`` per stale active entry.

    The caller owns the transaction boundary: every insert and stamp update of
    a run is flushed in the same session and committed (or rolled back)
    together, so a crash mid-run cannot leave an inserted transaction with a
    stale stamp. Running again with the same ``stamp`` inserts nothing.
    """

    when = today or date.today()
    entries = stale_recurring(session, stamp)
    for entry in entries:
        materialize_entry(session, entry, stamp, when)
        log.debug(
            "materialized recurring #%s (%s) for %s", entry.id, entry.source, stamp
        )
    session.flush()
    return len(entries)

"""SQLite-backed ledger store.

Every public method opens its own session, and every failure of the
underlying database surfaces as :class:`StoreError`. An empty result is a
success, never an error.
"""
from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from . import services
from .database import SessionLocal
from .logging_setup import get_logger
from .models import Kind, RecurringEntry, Transaction
from .tags import normalize_tag

log = get_logger("ledger_tui.store")


class StoreError(Exception):
    """A storage operation failed (I/O, locking or schema problems)."""


class LedgerStore:
    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory or SessionLocal

    @contextmanager
    def _session(self, action: str, write: bool = False) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            if write:
                session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            log.exception("%s failed", action)
            raise StoreError(f"{action} failed: {exc}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # transactions

    def list_transactions(self) -> list[Transaction]:
        """All transactions, newest date first."""
        with self._session("list transactions") as s:
            return (
                s.query(Transaction)
                .order_by(Transaction.date.desc(), Transaction.id.desc())
                .all()
            )

    def add_transaction(
        self,
        source: str,
        amount: float,
        kind: Kind | str,
        tag: str,
        date: str,
        recurring: bool = False,
    ) -> int:
        """Insert a transaction and return its id.

        With ``recurring`` set, a matching recurring template is created in
        the same database transaction.
        """

        kind_val = Kind.parse(kind).value
        tag_val = normalize_tag(tag)
        with self._session("add transaction", write=True) as s:
            txn = Transaction(
                source=source, amount=float(amount), kind=kind_val, tag=tag_val, date=date
            )
            s.add(txn)
            if recurring:
                s.add(
                    RecurringEntry(
                        source=source,
                        amount=float(amount),
                        kind=kind_val,
                        tag=tag_val,
                        last_inserted_month="",
                        active=True,
                    )
                )
            s.flush()
            new_id = txn.id
        log.debug("added transaction #%s recurring=%s", new_id, recurring)
        return new_id

    def update_transaction(
        self, txn_id: int, source: str, amount: float, kind: Kind | str, tag: str, date: str
    ) -> None:
        with self._session("update transaction", write=True) as s:
            txn = s.get(Transaction, txn_id)
            if txn is None:
                log.warning("update of missing transaction #%s ignored", txn_id)
                return
            txn.source = source
            txn.amount = float(amount)
            txn.kind = Kind.parse(kind).value
            txn.tag = normalize_tag(tag)
            txn.date = date
        log.debug("updated transaction #%s", txn_id)

    def delete_transaction(self, txn_id: int) -> None:
        with self._session("delete transaction", write=True) as s:
            txn = s.get(Transaction, txn_id)
            if txn is None:
                log.warning("delete of missing transaction #%s ignored", txn_id)
                return
            s.delete(txn)
        log.debug("deleted transaction #%s", txn_id)

    # aggregates

    def _sum_kind(self, kind: Kind) -> float:
        with self._session(f"sum {kind.value}") as s:
            total = (
                s.query(func.coalesce(func.sum(Transaction.amount), 0.0))
                .filter(Transaction.kind == kind.value)
                .scalar()
            )
        return float(total or 0.0)

    def total_earned(self) -> float:
        return self._sum_kind(Kind.CREDIT)

    def total_spent(self) -> float:
        return self._sum_kind(Kind.DEBIT)

    def spend_by_tag(self) -> dict[str, float]:
        with self._session("spend by tag") as s:
            rows = (
                s.query(Transaction.tag, func.coalesce(func.sum(Transaction.amount), 0.0))
                .filter(Transaction.kind == Kind.DEBIT.value)
                .group_by(Transaction.tag)
                .all()
            )
        totals: dict[str, float] = {}
        for tag, total in rows:
            key = normalize_tag(tag)
            totals[key] = totals.get(key, 0.0) + float(total)
        return totals

    # recurring entries

    def list_recurring(self) -> list[RecurringEntry]:
        with self._session("list recurring") as s:
            return s.query(RecurringEntry).order_by(RecurringEntry.id.desc()).all()

    def add_recurring(self, source: str, amount: float, kind: Kind | str, tag: str) -> int:
        with self._session("add recurring", write=True) as s:
            entry = RecurringEntry(
                source=source,
                amount=float(amount),
                kind=Kind.parse(kind).value,
                tag=normalize_tag(tag),
                last_inserted_month="",
                active=True,
            )
            s.add(entry)
            s.flush()
            new_id = entry.id
        log.debug("added recurring #%s", new_id)
        return new_id

    def delete_recurring(self, entry_id: int) -> None:
        with self._session("delete recurring", write=True) as s:
            entry = s.get(RecurringEntry, entry_id)
            if entry is not None:
                s.delete(entry)
        log.debug("deleted recurring #%s", entry_id)

    def set_recurring_active(self, entry_id: int, active: bool) -> None:
        with self._session("toggle recurring", write=True) as s:
            entry = s.get(RecurringEntry, entry_id)
            if entry is not None:
                entry.active = bool(active)
        log.debug("recurring #%s active=%s", entry_id, active)

    def materialize_recurring_for_month(self, stamp: str, today: date | None = None) -> int:
        """Run the monthly scheduler for ``stamp`` in one database transaction."""
        with self._session("materialize recurring", write=True) as s:
            count = services.materialize_recurring_for_month(s, stamp, today)
        if count:
            log.info("materialized %d recurring entries for %s", count, stamp)
        return count

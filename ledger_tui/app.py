"""Application context: mode, form, popup, selection and the ledger snapshot.

One :class:`App` is created by the event loop and handed to every key
handler. The snapshot (transactions, recurring entries, stats) is replaced
wholesale from the store after each successful mutation; a failed mutation
leaves the previous snapshot in place and surfaces an info popup instead.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Union

from .config import DEFAULT_CURRENCY, Settings
from .form import FormState
from .logging_setup import get_logger
from .services import month_stamp
from .stats import StatsSnapshot, compute_stats
from .store import LedgerStore, StoreError
from .tags import TagVocabulary

log = get_logger("ledger_tui.app")


class Mode(Enum):
    NORMAL = "normal"
    ADDING = "adding"
    STATS = "stats"
    POPUP = "popup"


@dataclass(frozen=True)
class DeleteTransaction:
    transaction_id: int


@dataclass(frozen=True)
class Quit:
    pass


PopupAction = Union[DeleteTransaction, Quit]


@dataclass(frozen=True)
class ConfirmPopup:
    title: str
    message: str
    action: PopupAction


@dataclass(frozen=True)
class InfoPopup:
    title: str
    message: str


Popup = Union[ConfirmPopup, InfoPopup]


class App:
    def __init__(
        self,
        store: LedgerStore,
        tags: TagVocabulary,
        currency: str = DEFAULT_CURRENCY,
        confirm_quit: bool = False,
        clock: Callable[[], date] = date.today,
    ):
        self.store = store
        self.tags = tags
        self.currency = currency
        self.confirm_quit = confirm_quit
        self._clock = clock

        self.mode = Mode.NORMAL
        self.form = FormState.blank(clock())
        self.popup: Popup | None = None

        self.transactions: list = []
        self.recurring_entries: list = []
        self.stats = StatsSnapshot()
        self.selected = 0
        self.last_scheduled_month: str | None = None

    @classmethod
    def from_settings(cls, store: LedgerStore, settings: Settings, **kwargs) -> "App":
        return cls(
            store,
            TagVocabulary(settings.tags),
            currency=settings.currency,
            confirm_quit=settings.confirm_quit,
            **kwargs,
        )

    def today(self) -> date:
        return self._clock()

    # snapshot

    def refresh(self) -> None:
        """Reload the snapshot from the store and clamp the selection."""
        transactions = self.store.list_transactions()
        recurring = self.store.list_recurring()
        self.transactions = transactions
        self.recurring_entries = recurring
        self.stats = compute_stats(transactions)
        self.clamp_selection()

    def clamp_selection(self) -> None:
        if not self.transactions:
            self.selected = 0
        elif self.selected >= len(self.transactions):
            self.selected = len(self.transactions) - 1

    def selected_transaction(self):
        if 0 <= self.selected < len(self.transactions):
            return self.transactions[self.selected]
        return None

    def move_selection(self, delta: int) -> None:
        if not self.transactions:
            self.selected = 0
            return
        self.selected = min(max(0, self.selected + delta), len(self.transactions) - 1)

    def mutate(self, what: str, operation: Callable[[], object]) -> bool:
        """Run a store mutation followed by a refresh.

        On :class:`StoreError` the in-progress form is discarded, the current
        snapshot is kept and an info popup reports the failure. A refresh
        that fails after a committed write is reported separately.
        """

        try:
            operation()
        except StoreError as exc:
            log.error("could not %s: %s", what, exc)
            self.form.reset(self.today())
            self.open_info_popup("Storage error", f"Could not {what}.\n{exc}")
            return False
        try:
            self.refresh()
        except StoreError as exc:
            log.error("%s succeeded but reload failed: %s", what, exc)
            self.form.reset(self.today())
            self.open_info_popup("Storage error", f"Saved, but could not reload the ledger.\n{exc}")
        return True

    # recurring scheduler

    def run_scheduler(self) -> int:
        """Materialize recurring entries once per calendar month."""
        stamp = month_stamp(self.today())
        if stamp == self.last_scheduled_month:
            return 0
        count = self.store.materialize_recurring_for_month(stamp, self.today())
        self.last_scheduled_month = stamp
        if count:
            self.refresh()
        return count

    def tick(self) -> None:
        """Per-loop housekeeping; picks up a month rollover while idle."""
        if self.mode is not Mode.NORMAL:
            return
        stamp = month_stamp(self.today())
        if stamp == self.last_scheduled_month:
            return
        try:
            self.run_scheduler()
        except StoreError as exc:
            # wait for the next month instead of retrying every poll
            self.last_scheduled_month = stamp
            log.error("recurring scheduler failed: %s", exc)
            self.open_info_popup("Storage error", f"Could not add recurring entries.\n{exc}")

    # form

    def begin_add(self) -> None:
        self.form.reset(self.today())
        self.mode = Mode.ADDING

    def begin_edit_selected(self) -> None:
        txn = self.selected_transaction()
        if txn is None:
            return
        self.form.load(txn, self.tags)
        self.mode = Mode.ADDING

    def cancel_form(self) -> None:
        self.form.reset(self.today())
        self.mode = Mode.NORMAL

    def save_transaction(self) -> bool:
        """Persist the form as a new or edited transaction.

        The amount falls back to ``0.0`` and the tag to ``other`` when the
        form holds something unusable. Only new transactions honour the
        recurring flag.
        """

        form = self.form
        amount = form.parsed_amount()
        tag = form.resolved_tag(self.tags)
        if form.editing is not None:
            txn_id = form.editing
            ok = self.mutate(
                "update the transaction",
                lambda: self.store.update_transaction(
                    txn_id, form.source, amount, form.kind, tag, form.date
                ),
            )
        else:
            recurring = form.recurring
            ok = self.mutate(
                "add the transaction",
                lambda: self.store.add_transaction(
                    form.source, amount, form.kind, tag, form.date, recurring=recurring
                ),
            )
        if ok and self.popup is None:
            self.form.reset(self.today())
            self.mode = Mode.NORMAL
        return ok

    # popups

    def request_delete_selected(self) -> None:
        txn = self.selected_transaction()
        if txn is None:
            return
        self.open_confirm_popup(
            "Confirm Delete",
            f"Delete this transaction?\n\n{txn.source}  ({self.currency}{txn.amount:.2f})",
            DeleteTransaction(txn.id),
        )

    def request_quit(self) -> bool:
        """Return ``True`` when the app should exit right away."""
        if not self.confirm_quit:
            return True
        self.open_confirm_popup("Quit", "Quit the ledger?", Quit())
        return False

    def open_confirm_popup(self, title: str, message: str, action: PopupAction) -> None:
        self.popup = ConfirmPopup(title, message, action)
        self.mode = Mode.POPUP

    def open_info_popup(self, title: str, message: str) -> None:
        self.popup = InfoPopup(title, message)
        self.mode = Mode.POPUP

    def close_popup(self) -> None:
        self.popup = None
        self.mode = Mode.NORMAL

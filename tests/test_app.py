from datetime import date

import pytest

from tests.helpers import Clock, make_app
from ledger_tui import handlers
from ledger_tui.app import ConfirmPopup, DeleteTransaction, InfoPopup, Mode, Quit
from ledger_tui.form import Field
from ledger_tui.keys import Intent
from ledger_tui.models import Kind
from ledger_tui.store import StoreError


def press(app, intent, char=""):
    return handlers.handle_key(app, intent, char)


def type_text(app, text):
    for ch in text:
        press(app, Intent.APPEND_CHAR, ch)


def seed(store, n):
    return [
        store.add_transaction(f"T{i}", float(i + 1), Kind.DEBIT, "food", f"2025-01-{i + 1:02d}")
        for i in range(n)
    ]


def test_initial_state(store):
    app = make_app(store)
    assert app.mode is Mode.NORMAL
    assert app.popup is None
    assert app.selected == 0
    assert app.form.date == "2025-06-15"


def test_quit_in_normal_exits_without_confirmation(store):
    app = make_app(store)
    assert press(app, Intent.QUIT) is True
    assert app.mode is Mode.NORMAL


def test_quit_confirmation_when_enabled(store):
    app = make_app(store, confirm_quit=True)
    assert press(app, Intent.QUIT) is False
    assert app.mode is Mode.POPUP
    assert app.popup.action == Quit()
    assert press(app, Intent.CONFIRM_YES) is True


def test_add_flow_creates_transaction(store):
    app = make_app(store)
    press(app, Intent.ADD)
    assert app.mode is Mode.ADDING
    type_text(app, "Salary")
    press(app, Intent.NEXT_FIELD)
    type_text(app, "1000")
    press(app, Intent.NEXT_FIELD)
    press(app, Intent.RIGHT)  # Debit -> Credit
    press(app, Intent.NEXT_FIELD)
    press(app, Intent.LEFT)  # food -> other
    press(app, Intent.SUBMIT)

    assert app.mode is Mode.NORMAL
    (txn,) = app.transactions
    assert (txn.source, txn.amount, txn.kind, txn.tag, txn.date) == (
        "Salary", 1000.0, "credit", "other", "2025-06-15",
    )
    assert app.stats.earned == 1000.0
    assert app.form.source == ""
    assert app.form.active is Field.SOURCE
    assert store.list_recurring() == []


def test_submit_fallbacks(store):
    app = make_app(store)
    press(app, Intent.ADD)
    app.form.amount = "abc"
    app.form.tag_index = 7
    press(app, Intent.SUBMIT)
    (txn,) = app.transactions
    assert txn.amount == 0.0
    assert txn.tag == "other"
    assert txn.source == ""


def test_recurring_flag_creates_template_on_create_only(store):
    app = make_app(store)
    press(app, Intent.ADD)
    type_text(app, "Rent")
    app.form.amount = "800"
    app.form.recurring = True
    press(app, Intent.SUBMIT)
    assert len(app.recurring_entries) == 1
    assert app.recurring_entries[0].last_inserted_month == ""

    press(app, Intent.EDIT_SELECTED)
    app.form.recurring = True
    press(app, Intent.SUBMIT)
    assert len(store.list_recurring()) == 1


def test_cancel_discards_form(store):
    seed(store, 1)
    app = make_app(store)
    press(app, Intent.EDIT_SELECTED)
    type_text(app, "zzz")
    press(app, Intent.CANCEL)
    assert app.mode is Mode.NORMAL
    assert app.form.editing is None
    assert app.form.source == ""
    assert [t.source for t in store.list_transactions()] == ["T0"]


def test_edit_round_trip_leaves_list_unchanged(store):
    seed(store, 3)
    store.add_transaction("Odd", 12.345, Kind.CREDIT, "travel", "2025-02-01")
    app = make_app(store)

    def rows():
        return [(t.id, t.source, t.amount, t.kind, t.tag, t.date) for t in app.transactions]

    before = rows()
    for idx in range(len(before)):
        app.selected = idx
        press(app, Intent.EDIT_SELECTED)
        assert app.form.editing == before[idx][0]
        press(app, Intent.SUBMIT)
        assert rows() == before


def test_edit_updates_selected_transaction(store):
    ids = seed(store, 2)
    app = make_app(store)
    app.selected = 1  # oldest, T0
    press(app, Intent.EDIT_SELECTED)
    assert app.form.editing == ids[0]
    press(app, Intent.REMOVE_CHAR)
    type_text(app, "X")
    press(app, Intent.SUBMIT)
    assert app.form.editing is None
    assert sorted(t.source for t in app.transactions) == ["T1", "TX"]


def test_edit_with_unknown_tag_uses_first_vocabulary_tag(store):
    store.add_transaction("Odd", 1.0, Kind.DEBIT, "gifts", "2025-01-01")
    app = make_app(store)
    press(app, Intent.EDIT_SELECTED)
    assert app.form.tag_index == 0


def test_edit_and_delete_on_empty_list_are_noops(store):
    app = make_app(store)
    press(app, Intent.EDIT_SELECTED)
    assert app.mode is Mode.NORMAL
    press(app, Intent.DELETE_SELECTED)
    assert app.mode is Mode.NORMAL
    assert app.popup is None


def test_navigation_stays_in_bounds(store):
    seed(store, 3)
    app = make_app(store)
    press(app, Intent.UP)
    assert app.selected == 0
    for _ in range(5):
        press(app, Intent.DOWN)
    assert app.selected == 2


def test_delete_requires_confirmation(store):
    ids = seed(store, 2)
    app = make_app(store)
    press(app, Intent.DELETE_SELECTED)
    assert app.mode is Mode.POPUP
    assert isinstance(app.popup, ConfirmPopup)
    assert app.popup.action == DeleteTransaction(ids[1])
    assert "$2.00" in app.popup.message

    press(app, Intent.CONFIRM_NO)
    assert app.mode is Mode.NORMAL
    assert len(app.transactions) == 2

    press(app, Intent.DELETE_SELECTED)
    press(app, Intent.CONFIRM_YES)
    assert app.mode is Mode.NORMAL
    assert app.popup is None
    assert [t.id for t in app.transactions] == [ids[0]]


def test_selection_clamps_when_last_row_deleted(store):
    seed(store, 2)
    app = make_app(store)
    press(app, Intent.DOWN)
    assert app.selected == 1
    press(app, Intent.DELETE_SELECTED)
    press(app, Intent.CONFIRM_YES)
    assert app.selected == 0
    press(app, Intent.DELETE_SELECTED)
    press(app, Intent.CONFIRM_YES)
    assert app.transactions == []
    assert app.selected == 0


@pytest.mark.parametrize(
    "intent",
    [
        Intent.QUIT,
        Intent.ADD,
        Intent.EDIT_SELECTED,
        Intent.DELETE_SELECTED,
        Intent.SHOW_STATS,
        Intent.BACK,
        Intent.UP,
        Intent.DOWN,
        Intent.NEXT_FIELD,
        Intent.LEFT,
        Intent.RIGHT,
        Intent.APPEND_CHAR,
        Intent.REMOVE_CHAR,
        Intent.SUBMIT,
    ],
)
def test_popup_ignores_everything_but_confirm_and_cancel(store, intent):
    seed(store, 2)
    app = make_app(store)
    press(app, Intent.DELETE_SELECTED)
    popup = app.popup
    assert press(app, intent, "x") is False
    assert app.mode is Mode.POPUP
    assert app.popup is popup
    assert app.selected == 0
    assert len(store.list_transactions()) == 2


def test_stats_mode_round_trip(store):
    app = make_app(store)
    press(app, Intent.SHOW_STATS)
    assert app.mode is Mode.STATS
    press(app, Intent.ADD)
    assert app.mode is Mode.STATS
    press(app, Intent.BACK)
    assert app.mode is Mode.NORMAL


def test_info_popup_closes_on_confirm(store):
    app = make_app(store)
    app.open_info_popup("Hello", "World")
    assert app.mode is Mode.POPUP
    assert press(app, Intent.CONFIRM_YES) is False
    assert app.mode is Mode.NORMAL
    assert app.popup is None


def test_execute_rejects_unknown_actions(store):
    app = make_app(store)
    with pytest.raises(TypeError):
        handlers.execute(object(), app)


class BrokenWrites:
    """Store proxy whose writes fail."""

    def __init__(self, store):
        self._store = store

    def __getattr__(self, name):
        return getattr(self._store, name)

    def _fail(self, *args, **kwargs):
        raise StoreError("disk I/O error")

    add_transaction = update_transaction = delete_transaction = _fail
    materialize_recurring_for_month = _fail


def test_failed_submit_shows_info_popup_and_keeps_snapshot(store):
    seed(store, 1)
    app = make_app(BrokenWrites(store))
    before = list(app.transactions)
    press(app, Intent.ADD)
    type_text(app, "New")
    press(app, Intent.SUBMIT)
    assert app.mode is Mode.POPUP
    assert isinstance(app.popup, InfoPopup)
    assert "disk I/O error" in app.popup.message
    assert app.transactions == before
    assert app.form.source == ""
    press(app, Intent.CONFIRM_YES)
    assert app.mode is Mode.NORMAL


def test_failed_delete_reports_error(store):
    seed(store, 1)
    app = make_app(BrokenWrites(store))
    press(app, Intent.DELETE_SELECTED)
    press(app, Intent.CONFIRM_YES)
    assert isinstance(app.popup, InfoPopup)
    assert len(app.transactions) == 1
    press(app, Intent.CANCEL)
    assert app.mode is Mode.NORMAL


def test_scheduler_runs_once_per_month(store):
    store.add_recurring("Rent", 800.0, Kind.DEBIT, "bills")
    clock = Clock(date(2025, 6, 15))
    app = make_app(store)
    app._clock = clock
    assert app.run_scheduler() == 1
    assert app.run_scheduler() == 0
    assert [t.source for t in app.transactions] == ["Rent"]

    clock.today = date(2025, 7, 1)
    app.tick()
    assert [t.date for t in app.transactions] == ["2025-07-01", "2025-06-15"]


def test_tick_waits_while_form_is_open(store):
    store.add_recurring("Rent", 800.0, Kind.DEBIT, "bills")
    app = make_app(store)
    press(app, Intent.ADD)
    app.tick()
    assert store.list_transactions() == []
    press(app, Intent.CANCEL)
    app.tick()
    assert len(app.transactions) == 1


def test_tick_surfaces_scheduler_errors(store):
    app = make_app(BrokenWrites(store))
    app.tick()
    assert isinstance(app.popup, InfoPopup)


class CountingBrokenScheduler(BrokenWrites):
    def __init__(self, store):
        super().__init__(store)
        self.calls = 0

    def materialize_recurring_for_month(self, *args, **kwargs):
        self.calls += 1
        raise StoreError("database is locked")


def test_failed_scheduler_is_not_retried_every_poll(store):
    broken = CountingBrokenScheduler(store)
    clock = Clock(date(2025, 6, 15))
    app = make_app(broken)
    app._clock = clock
    popups = 0
    for _ in range(3):
        app.tick()
        if app.popup is not None:
            popups += 1
            app.close_popup()
    assert broken.calls == 1
    assert popups == 1
    assert app.mode is Mode.NORMAL

    clock.today = date(2025, 7, 1)
    app.tick()
    assert broken.calls == 2


class BrokenReads:
    """Store proxy whose reads fail once ``broken`` is set."""

    def __init__(self, store):
        self._store = store
        self.broken = False

    def __getattr__(self, name):
        return getattr(self._store, name)

    def list_transactions(self):
        if self.broken:
            raise StoreError("disk I/O error")
        return self._store.list_transactions()


def test_failed_reload_after_save_reports_saved(store):
    proxy = BrokenReads(store)
    app = make_app(proxy)
    press(app, Intent.ADD)
    type_text(app, "Tea")
    proxy.broken = True
    assert app.save_transaction() is True
    assert isinstance(app.popup, InfoPopup)
    assert app.popup.message.startswith("Saved, but could not reload the ledger.")
    assert app.mode is Mode.POPUP
    assert app.transactions == []
    assert [t.source for t in store.list_transactions()] == ["Tea"]
    press(app, Intent.CONFIRM_YES)
    assert app.mode is Mode.NORMAL

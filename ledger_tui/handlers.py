"""Key handlers for each mode.

Every handler takes the :class:`~ledger_tui.app.App` context and returns
``True`` when the application should exit.
"""
from __future__ import annotations

from .app import App, ConfirmPopup, DeleteTransaction, Mode, PopupAction, Quit
from .keys import Intent, translate
from .logging_setup import get_logger

log = get_logger("ledger_tui.handlers")


def handle_raw_key(app: App, key: int | str) -> bool:
    event = translate(app.mode, key)
    if event is None:
        return False
    intent, char = event
    return handle_key(app, intent, char)


def handle_key(app: App, intent: Intent, char: str = "") -> bool:
    if app.mode is Mode.NORMAL:
        return handle_normal(app, intent)
    if app.mode is Mode.ADDING:
        return handle_form(app, intent, char)
    if app.mode is Mode.STATS:
        return handle_stats(app, intent)
    return handle_popup(app, intent)


def execute(action: PopupAction, app: App) -> bool:
    """Carry out a confirmed popup action."""
    if isinstance(action, DeleteTransaction):
        app.mutate(
            "delete the transaction",
            lambda: app.store.delete_transaction(action.transaction_id),
        )
        return False
    if isinstance(action, Quit):
        return True
    raise TypeError(f"unknown popup action: {action!r}")


def handle_popup(app: App, intent: Intent) -> bool:
    if intent is Intent.CONFIRM_YES:
        popup = app.popup
        # close first so a failing action can open its own info popup
        app.close_popup()
        if isinstance(popup, ConfirmPopup):
            log.debug("popup confirmed: %r", popup.action)
            return execute(popup.action, app)
    elif intent in (Intent.CONFIRM_NO, Intent.CANCEL):
        app.close_popup()
    return False


def handle_normal(app: App, intent: Intent) -> bool:
    if intent is Intent.QUIT:
        return app.request_quit()
    if intent is Intent.ADD:
        app.begin_add()
    elif intent is Intent.SHOW_STATS:
        app.mode = Mode.STATS
    elif intent is Intent.UP:
        app.move_selection(-1)
    elif intent is Intent.DOWN:
        app.move_selection(1)
    elif intent is Intent.DELETE_SELECTED:
        app.request_delete_selected()
    elif intent is Intent.EDIT_SELECTED:
        app.begin_edit_selected()
    return False


def handle_stats(app: App, intent: Intent) -> bool:
    if intent in (Intent.BACK, Intent.CANCEL):
        app.mode = Mode.NORMAL
    return False


def handle_form(app: App, intent: Intent, char: str = "") -> bool:
    form = app.form
    if intent is Intent.CANCEL:
        app.cancel_form()
    elif intent is Intent.NEXT_FIELD:
        form.next_field()
    elif intent is Intent.RIGHT:
        form.cycle(app.tags, forward=True)
    elif intent is Intent.LEFT:
        form.cycle(app.tags, forward=False)
    elif intent is Intent.REMOVE_CHAR:
        form.pop_char()
    elif intent is Intent.APPEND_CHAR and char:
        form.push_char(char)
    elif intent is Intent.SUBMIT:
        app.save_transaction()
    return False

"""Prompt-driven manager for recurring entries."""
from __future__ import annotations

from datetime import date

import questionary

from .config import Settings
from .database import init_db
from .logging_setup import configure_logging, get_logger
from .models import Kind
from .services import month_stamp
from .store import LedgerStore, StoreError

log = get_logger("ledger_tui.recurring_cli")

MENU = ["List entries", "Toggle active", "Delete entry", "Run scheduler now", "Quit"]


def describe(entry, currency: str) -> str:
    last = entry.last_inserted_month or "never"
    state = "active" if entry.active else "paused"
    return (
        f"{entry.source} - {currency}{entry.amount:.2f} "
        f"{Kind.parse(entry.kind).label} <{entry.tag}> (last: {last}, {state})"
    )


def pick_entry(entries, currency: str, message: str):
    if not entries:
        print("No recurring entries.\n")
        return None
    choices = [questionary.Choice(title=describe(e, currency), value=e) for e in entries]
    choices.append(questionary.Choice(title="Back", value=None))
    return questionary.select(message, choices=choices).ask()


def main(store: LedgerStore | None = None, settings: Settings | None = None) -> None:
    """Entry point for the recurring entry manager."""
    settings = settings or Settings.load()
    configure_logging(settings.log_level)
    if store is None:
        init_db()
        store = LedgerStore()

    while True:
        choice = questionary.select("Choose an option:", choices=MENU).ask()
        if choice is None or choice == "Quit":
            break
        try:
            entries = store.list_recurring()
            if choice == "List entries":
                if not entries:
                    print("No recurring entries.\n")
                else:
                    for e in entries:
                        print(describe(e, settings.currency))
                    print()
                questionary.press_any_key_to_continue("Press any key to return to menu").ask()
            elif choice == "Toggle active":
                entry = pick_entry(entries, settings.currency, "Toggle which entry?")
                if entry is not None:
                    store.set_recurring_active(entry.id, not entry.active)
                    print(f"{entry.source} is now {'paused' if entry.active else 'active'}.\n")
            elif choice == "Delete entry":
                entry = pick_entry(entries, settings.currency, "Delete which entry?")
                if entry is not None and questionary.confirm(
                    f"Delete recurring entry '{entry.source}'?", default=False
                ).ask():
                    store.delete_recurring(entry.id)
                    print("Recurring entry deleted.\n")
            elif choice == "Run scheduler now":
                today = date.today()
                count = store.materialize_recurring_for_month(month_stamp(today), today)
                print(f"Added {count} transaction(s) for {month_stamp(today)}.\n")
        except StoreError as exc:
            log.error("recurring manager: %s", exc)
            print(f"Storage error: {exc}\n")


if __name__ == "__main__":
    main()

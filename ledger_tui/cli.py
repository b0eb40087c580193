"""Curses front end: draws the application state and feeds keys to the handlers."""
from __future__ import annotations

import curses
import textwrap
from contextlib import contextmanager

from .app import App, ConfirmPopup, Mode
from .config import Settings, log_path
from .database import SessionLocal, init_db
from .form import FIELD_ORDER, Field, FormState
from .handlers import handle_raw_key
from .logging_setup import configure_logging, get_logger
from .models import Kind
from .store import LedgerStore
from .tags import TagVocabulary

log = get_logger("ledger_tui.cli")

# input poll timeout so the screen keeps refreshing while idle
POLL_MS = 200

NORMAL_HELP = "a:add e:edit d:del s:stats q:quit"
FORM_HELP = "Tab:next  ←/→:change  Enter:save  Esc:cancel"
STATS_HELP = "Esc/q:back"


def _center_box(stdscr, height: int, width: int) -> "curses.window":
    """Create a bordered window centered on ``stdscr``."""

    h, w = stdscr.getmaxyx()
    height = max(3, min(height, h))
    width = max(4, min(width, w))
    y = max(0, (h - height) // 2)
    x = max(0, (w - width) // 2)
    win = curses.newwin(height, width, y, x)
    win.box()
    return win


@contextmanager
def temp_cursor(state: int):
    """Temporarily set cursor visibility and restore on exit."""

    prev = None
    try:
        prev = curses.curs_set(state)
    except curses.error:  # pragma: no cover - some terminals
        prev = None
    try:
        yield
    finally:
        if prev is not None:
            try:
                curses.curs_set(prev)
            except curses.error:  # pragma: no cover - cleanup best effort
                pass


@contextmanager
def keypad_mode(win):
    """Enable keypad mode and ensure it is disabled afterwards."""

    try:
        win.keypad(True)
    except curses.error:  # pragma: no cover - fake windows
        pass
    try:
        yield
    finally:
        try:
            win.keypad(False)
        except curses.error:  # pragma: no cover - fake windows
            pass


def _put(win, y: int, x: int, line: str, width: int, attr: int = curses.A_NORMAL) -> None:
    if width <= 0:
        return
    try:
        win.addnstr(y, x, line, width, attr)
    except curses.error:
        pass


def money(currency: str, amount: float) -> str:
    return f"{currency}{amount:.2f}"


def header_line(app: App) -> str:
    s = app.stats
    return (
        f"Earned: {money(app.currency, s.earned)}   "
        f"Spent: {money(app.currency, s.spent)}   "
        f"Balance: {money(app.currency, s.balance)}"
    )


def transaction_line(txn, currency: str, source_w: int) -> str:
    kind = Kind.parse(txn.kind).label
    return (
        f"{txn.date:<10}  {txn.source[:source_w]:<{source_w}}  "
        f"{currency}{txn.amount:>10.2f}  {kind:<6}  <{txn.tag}>"
    )


def form_lines(form: FormState, tags: TagVocabulary) -> list[tuple[Field, str]]:
    values = {
        Field.SOURCE: form.source,
        Field.AMOUNT: form.amount,
        Field.KIND: f"< {form.kind.label} >",
        Field.TAG: f"< {tags.resolve(form.tag_index)} >",
        Field.DATE: form.date,
        Field.RECURRING: f"< {'yes' if form.recurring else 'no'} >",
    }
    return [(f, f"{f.value:<9}: {values[f]}") for f in FIELD_ORDER]


def draw_footer(win, h: int, w: int, left: str, right: str) -> None:
    _put(win, h - 1, 0, left, w - 1)
    if right:
        _put(win, h - 1, max(0, w - len(right) - 1), right, len(right))


def draw_normal(stdscr, app: App, h: int, w: int) -> None:
    head = header_line(app)
    _put(stdscr, 0, max(0, (w - len(head)) // 2), head, w - 1)

    txns = app.transactions
    source_w = max(6, min(24, max((len(t.source) for t in txns), default=6)))
    columns = f"{'Date':<10}  {'Source':<{source_w}}  {'Amount':>{10 + len(app.currency)}}  {'Type':<6}  Tag"
    _put(stdscr, 1, 0, columns, w - 1, curses.A_BOLD)

    visible = max(0, h - 3)
    if not txns:
        _put(stdscr, 2, 0, "No transactions yet. Press 'a' to add one.", w - 1)
    else:
        top = min(max(0, app.selected - visible // 2), max(0, len(txns) - visible))
        for i in range(visible):
            line_idx = top + i
            if line_idx >= len(txns):
                break
            line = transaction_line(txns[line_idx], app.currency, source_w)
            attr = curses.A_REVERSE if line_idx == app.selected else curses.A_NORMAL
            _put(stdscr, 2 + i, 0, line, w - 1, attr)

    pos = f"{app.selected + 1}/{len(txns)}" if txns else "0/0"
    draw_footer(stdscr, h, w, NORMAL_HELP, pos)


def draw_stats(stdscr, app: App, h: int, w: int) -> None:
    s = app.stats
    _put(stdscr, 0, 0, "Stats", w - 1, curses.A_BOLD)
    lines = [
        f"Total earned : {money(app.currency, s.earned)}",
        f"Total spent  : {money(app.currency, s.spent)}",
        f"Balance      : {money(app.currency, s.balance)}",
        "",
        "Spending by tag",
    ]
    ranked = s.ranked_tags()
    if not ranked:
        lines.append("  (no spending yet)")
    else:
        tag_w = max(len(t) for t, _ in ranked)
        bar_w = max(1, w - tag_w - 24)
        top = ranked[0][1] or 1.0
        for tag, total in ranked:
            bar = "█" * max(1 if total else 0, int(round(total / top * bar_w)))
            lines.append(f"  <{tag:<{tag_w}}> {bar} {money(app.currency, total)}")
    for i, line in enumerate(lines[: max(0, h - 2)]):
        _put(stdscr, 1 + i, 0, line, w - 1)
    draw_footer(stdscr, h, w, STATS_HELP, "")


def draw_form(stdscr, app: App) -> "curses.window":
    title = "Edit transaction" if app.form.editing is not None else "Add transaction"
    rows = form_lines(app.form, app.tags)
    width = max(len(FORM_HELP), max(len(line) for _, line in rows), 40) + 4
    win = _center_box(stdscr, len(rows) + 4, width)
    _put(win, 0, 2, f" {title} ", width - 4, curses.A_BOLD)
    for i, (fld, line) in enumerate(rows):
        attr = curses.A_REVERSE if fld is app.form.active else curses.A_NORMAL
        _put(win, 1 + i, 2, line, width - 4, attr)
    _put(win, len(rows) + 2, 2, FORM_HELP, width - 4)
    return win


def draw_popup(stdscr, app: App) -> "curses.window | None":
    popup = app.popup
    if popup is None:
        return None
    _, w = stdscr.getmaxyx()
    inner = max(20, min(60, w - 6))
    body: list[str] = []
    for para in popup.message.split("\n"):
        body.extend(textwrap.wrap(para, inner) or [""])
    hint = "y:yes  n:no" if isinstance(popup, ConfirmPopup) else "Press Enter to close"
    width = max(len(popup.title) + 4, max(len(b) for b in body), len(hint)) + 4
    win = _center_box(stdscr, len(body) + 4, width)
    _put(win, 0, 2, f" {popup.title} ", width - 4, curses.A_BOLD)
    for i, line in enumerate(body):
        _put(win, 1 + i, 2, line, width - 4)
    _put(win, len(body) + 2, 2, hint, width - 4)
    return win


def draw(stdscr, app: App) -> None:
    h, w = stdscr.getmaxyx()
    h = max(1, h)
    w = max(1, w)
    stdscr.erase()
    if app.mode is Mode.STATS:
        draw_stats(stdscr, app, h, w)
    else:
        draw_normal(stdscr, app, h, w)
    stdscr.noutrefresh()

    overlay = None
    if app.mode is Mode.ADDING:
        overlay = draw_form(stdscr, app)
    elif app.mode is Mode.POPUP:
        overlay = draw_popup(stdscr, app)
    if overlay is not None:
        try:
            overlay.noutrefresh()
        except curses.error:
            pass
    curses.doupdate()


def read_key(stdscr) -> int | str:
    """Next key from ``get_wch``; -1 when the poll timed out."""
    try:
        return stdscr.get_wch()
    except curses.error:
        return -1


def run(stdscr, app: App) -> None:
    """Draw/poll loop; returns when a handler asks to exit."""
    with temp_cursor(0), keypad_mode(stdscr):
        stdscr.timeout(POLL_MS)
        while True:
            draw(stdscr, app)
            key = read_key(stdscr)
            if key == curses.KEY_RESIZE:
                curses.update_lines_cols()
                stdscr.clearok(True)
                continue
            if key == -1:
                app.tick()
                continue
            if handle_raw_key(app, key):
                break


def main(stdscr, settings: Settings | None = None) -> None:
    settings = settings or Settings.load()
    configure_logging(settings.log_level, log_file=log_path())
    try:
        curses.use_default_colors()
    except curses.error:  # pragma: no cover - terminals without color
        pass
    init_db()
    app = App.from_settings(LedgerStore(SessionLocal), settings)
    log.info("starting with %d tags, currency %r", len(app.tags), app.currency)
    app.run_scheduler()
    app.refresh()
    run(stdscr, app)
    log.info("exiting")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    curses.wrapper(main)

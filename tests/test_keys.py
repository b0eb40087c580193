import curses

import pytest

from tests import helpers  # noqa: F401  # ensures project root on sys.path
from ledger_tui.app import Mode
from ledger_tui.keys import Intent, translate


@pytest.mark.parametrize(
    "key, intent",
    [
        (ord("q"), Intent.QUIT),
        (ord("a"), Intent.ADD),
        (ord("e"), Intent.EDIT_SELECTED),
        (ord("d"), Intent.DELETE_SELECTED),
        (ord("s"), Intent.SHOW_STATS),
        (curses.KEY_UP, Intent.UP),
        (ord("j"), Intent.DOWN),
    ],
)
def test_normal_mode_keys(key, intent):
    assert translate(Mode.NORMAL, key) == (intent, "")


def test_letters_are_text_while_adding():
    assert translate(Mode.ADDING, ord("q")) == (Intent.APPEND_CHAR, "q")
    assert translate(Mode.ADDING, ord(" ")) == (Intent.APPEND_CHAR, " ")
    assert translate(Mode.ADDING, 9) == (Intent.NEXT_FIELD, "")
    assert translate(Mode.ADDING, 10) == (Intent.SUBMIT, "")
    assert translate(Mode.ADDING, 27) == (Intent.CANCEL, "")
    assert translate(Mode.ADDING, 127) == (Intent.REMOVE_CHAR, "")
    assert translate(Mode.ADDING, curses.KEY_BACKSPACE) == (Intent.REMOVE_CHAR, "")
    assert translate(Mode.ADDING, curses.KEY_LEFT) == (Intent.LEFT, "")
    assert translate(Mode.ADDING, curses.KEY_F1) is None


def test_popup_keys():
    assert translate(Mode.POPUP, ord("y")) == (Intent.CONFIRM_YES, "")
    assert translate(Mode.POPUP, 10) == (Intent.CONFIRM_YES, "")
    assert translate(Mode.POPUP, ord("n")) == (Intent.CONFIRM_NO, "")
    assert translate(Mode.POPUP, 27) == (Intent.CONFIRM_NO, "")
    assert translate(Mode.POPUP, ord("q")) is None


def test_stats_keys_and_timeouts():
    assert translate(Mode.STATS, 27) == (Intent.BACK, "")
    assert translate(Mode.STATS, ord("a")) is None
    assert translate(Mode.NORMAL, -1) is None


def test_wide_characters_while_adding():
    assert translate(Mode.ADDING, "é") == (Intent.APPEND_CHAR, "é")
    assert translate(Mode.ADDING, "\n") == (Intent.SUBMIT, "")
    assert translate(Mode.ADDING, "\x1b") == (Intent.CANCEL, "")
    assert translate(Mode.ADDING, "\x7f") == (Intent.REMOVE_CHAR, "")
    assert translate(Mode.ADDING, "\x01") is None
    assert translate(Mode.NORMAL, "q") == (Intent.QUIT, "")


def test_characters_never_alias_function_keys():
    ch = chr(curses.KEY_UP)
    assert translate(Mode.NORMAL, ch) is None
    assert translate(Mode.ADDING, ch) == (Intent.APPEND_CHAR, ch)

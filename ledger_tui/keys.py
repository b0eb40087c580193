"""Translate raw curses key codes into mode-specific intents."""
from __future__ import annotations

import curses
from enum import Enum, auto

from .app import Mode

ESC = 27
ENTER_KEYS = (curses.KEY_ENTER, 10, 13)
BACKSPACE_KEYS = (curses.KEY_BACKSPACE, 127, 8)
TAB = 9


class Intent(Enum):
    QUIT = auto()
    ADD = auto()
    EDIT_SELECTED = auto()
    DELETE_SELECTED = auto()
    SHOW_STATS = auto()
    BACK = auto()
    UP = auto()
    DOWN = auto()
    NEXT_FIELD = auto()
    LEFT = auto()
    RIGHT = auto()
    APPEND_CHAR = auto()
    REMOVE_CHAR = auto()
    SUBMIT = auto()
    CANCEL = auto()
    CONFIRM_YES = auto()
    CONFIRM_NO = auto()


# (intent, char); char is "" except for APPEND_CHAR
KeyEvent = tuple[Intent, str]

NORMAL_KEYS = {
    ord("q"): Intent.QUIT,
    ord("a"): Intent.ADD,
    ord("e"): Intent.EDIT_SELECTED,
    ord("d"): Intent.DELETE_SELECTED,
    ord("s"): Intent.SHOW_STATS,
    curses.KEY_UP: Intent.UP,
    ord("k"): Intent.UP,
    curses.KEY_DOWN: Intent.DOWN,
    ord("j"): Intent.DOWN,
}

STATS_KEYS = {
    ESC: Intent.BACK,
    ord("q"): Intent.BACK,
    ord("b"): Intent.BACK,
    ord("s"): Intent.BACK,
}

POPUP_KEYS = {
    ord("y"): Intent.CONFIRM_YES,
    ord("Y"): Intent.CONFIRM_YES,
    ord("n"): Intent.CONFIRM_NO,
    ord("N"): Intent.CONFIRM_NO,
    ESC: Intent.CONFIRM_NO,
}
for _k in ENTER_KEYS:
    POPUP_KEYS[_k] = Intent.CONFIRM_YES

FORM_KEYS = {
    ESC: Intent.CANCEL,
    TAB: Intent.NEXT_FIELD,
    curses.KEY_LEFT: Intent.LEFT,
    curses.KEY_RIGHT: Intent.RIGHT,
}
for _k in ENTER_KEYS:
    FORM_KEYS[_k] = Intent.SUBMIT
for _k in BACKSPACE_KEYS:
    FORM_KEYS[_k] = Intent.REMOVE_CHAR


def _printable(key: int | str) -> str | None:
    if isinstance(key, str):
        return key if key.isprintable() else None
    if 32 <= key <= 0x10FFFF and not (curses.KEY_MIN <= key <= curses.KEY_MAX):
        ch = chr(key)
        if ch.isprintable():
            return ch
    return None


def translate(mode: Mode, key: int | str) -> KeyEvent | None:
    """Map ``key`` to ``(intent, char)`` for ``mode``; ``None`` when unbound.

    ``key`` is either a curses key code or a character as returned by
    ``get_wch``.
    """
    if isinstance(key, str):
        if len(key) != 1:
            return None
        code = ord(key)
        # wide characters share numbers with the KEY_* codes
        if code >= curses.KEY_MIN:
            code = -1
    elif key is None or key < 0:
        return None
    else:
        code = key
    if mode is Mode.NORMAL:
        intent = NORMAL_KEYS.get(code)
    elif mode is Mode.STATS:
        intent = STATS_KEYS.get(code)
    elif mode is Mode.POPUP:
        intent = POPUP_KEYS.get(code)
    else:
        intent = FORM_KEYS.get(code)
        if intent is None:
            ch = _printable(key)
            if ch is not None:
                return Intent.APPEND_CHAR, ch
    if intent is None:
        return None
    return intent, ""

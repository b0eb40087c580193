"""In-progress transaction form used by the add/edit screen."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum

from .models import Kind
from .tags import TagVocabulary


class Field(Enum):
    SOURCE = "Source"
    AMOUNT = "Amount"
    KIND = "Type"
    TAG = "Tag"
    DATE = "Date"
    RECURRING = "Recurring"

    def next(self) -> "Field":
        return _SUCCESSOR[self]


_SUCCESSOR = {
    Field.SOURCE: Field.AMOUNT,
    Field.AMOUNT: Field.KIND,
    Field.KIND: Field.TAG,
    Field.TAG: Field.DATE,
    Field.DATE: Field.RECURRING,
    Field.RECURRING: Field.SOURCE,
}

FIELD_ORDER = (
    Field.SOURCE,
    Field.AMOUNT,
    Field.KIND,
    Field.TAG,
    Field.DATE,
    Field.RECURRING,
)


def parse_amount(text: str) -> float:
    """Amount text as a non-negative number; anything unparsable is ``0.0``."""
    try:
        value = float(text.strip())
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return abs(value)


def format_amount(amount: float) -> str:
    """Text for an amount that parses back to the same value."""
    text = f"{amount:.2f}"
    return text if float(text) == amount else repr(float(amount))


@dataclass
class FormState:
    source: str = ""
    amount: str = ""
    kind: Kind = Kind.DEBIT
    tag_index: int = 0
    date: str = ""
    recurring: bool = False
    active: Field = Field.SOURCE
    # id of the transaction being edited; None while creating
    editing: int | None = None

    def reset(self, today: date | None = None) -> None:
        self.source = ""
        self.amount = ""
        self.kind = Kind.DEBIT
        self.tag_index = 0
        self.date = (today or date.today()).isoformat()
        self.recurring = False
        self.active = Field.SOURCE
        self.editing = None

    @classmethod
    def blank(cls, today: date | None = None) -> "FormState":
        form = cls()
        form.reset(today)
        return form

    def load(self, txn, vocabulary: TagVocabulary) -> None:
        """Copy every field of ``txn`` into the form for editing.

        A tag missing from the vocabulary maps to index 0.
        """

        self.source = txn.source or ""
        self.amount = format_amount(txn.amount or 0.0)
        self.kind = Kind.parse(txn.kind)
        idx = vocabulary.index_of(txn.tag)
        self.tag_index = idx if idx is not None else 0
        self.date = txn.date or ""
        self.recurring = False
        self.active = Field.SOURCE
        self.editing = txn.id

    # field navigation and edits

    def next_field(self) -> None:
        self.active = self.active.next()

    def push_char(self, ch: str) -> None:
        if self.active is Field.SOURCE:
            self.source += ch
        elif self.active is Field.AMOUNT:
            self.amount += ch
        elif self.active is Field.DATE:
            self.date += ch

    def pop_char(self) -> None:
        if self.active is Field.SOURCE:
            self.source = self.source[:-1]
        elif self.active is Field.AMOUNT:
            self.amount = self.amount[:-1]
        elif self.active is Field.DATE:
            self.date = self.date[:-1]

    def toggle_kind(self) -> None:
        self.kind = self.kind.toggled()

    def toggle_recurring(self) -> None:
        self.recurring = not self.recurring

    def next_tag(self, vocabulary: TagVocabulary) -> None:
        self.tag_index = vocabulary.successor(self.tag_index)

    def prev_tag(self, vocabulary: TagVocabulary) -> None:
        self.tag_index = vocabulary.predecessor(self.tag_index)

    def cycle(self, vocabulary: TagVocabulary, forward: bool) -> None:
        """Left/right input on the active field."""
        if self.active is Field.KIND:
            self.toggle_kind()
        elif self.active is Field.TAG:
            if forward:
                self.next_tag(vocabulary)
            else:
                self.prev_tag(vocabulary)
        elif self.active is Field.RECURRING:
            self.toggle_recurring()

    # submit helpers

    def parsed_amount(self) -> float:
        return parse_amount(self.amount)

    def resolved_tag(self, vocabulary: TagVocabulary) -> str:
        return vocabulary.resolve(self.tag_index)

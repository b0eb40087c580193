"""Totals and per-tag spending derived from a transaction snapshot."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .models import Kind
from .tags import normalize_tag


@dataclass(frozen=True)
class StatsSnapshot:
    earned: float = 0.0
    spent: float = 0.0
    by_tag: dict[str, float] = field(default_factory=dict)

    @property
    def balance(self) -> float:
        return self.earned - self.spent

    def ranked_tags(self) -> list[tuple[str, float]]:
        """Tags by descending spend, ties broken alphabetically."""
        return sorted(self.by_tag.items(), key=lambda kv: (-kv[1], kv[0]))


def compute_stats(transactions: Iterable) -> StatsSnapshot:
    """Aggregate ``transactions``.

    Credits count towards ``earned`` only; the per-tag breakdown answers
    "where did spending go" and therefore sums debits alone.
    """

    earned = 0.0
    spent = 0.0
    by_tag: dict[str, float] = {}
    for t in transactions:
        amount = t.amount or 0.0
        if Kind.parse(t.kind) is Kind.CREDIT:
            earned += amount
        else:
            spent += amount
            tag = normalize_tag(t.tag)
            by_tag[tag] = by_tag.get(tag, 0.0) + amount
    return StatsSnapshot(earned=earned, spent=spent, by_tag=by_tag)

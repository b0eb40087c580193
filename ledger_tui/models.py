from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, Integer, String, Float, Boolean

from .database import Base


class Kind(str, Enum):
    """Direction of money: credit is earned, debit is spent."""

    CREDIT = "credit"
    DEBIT = "debit"

    def toggled(self) -> "Kind":
        return Kind.DEBIT if self is Kind.CREDIT else Kind.CREDIT

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, raw: "str | Kind | None") -> "Kind":
        """Anything other than ``credit`` reads as a debit."""
        if isinstance(raw, Kind):
            return raw
        if raw is not None and str(raw).strip().lower() == cls.CREDIT.value:
            return cls.CREDIT
        return cls.DEBIT


class Transaction(Base):
    """A dated credit or debit."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    source = Column(String, nullable=False, default="")
    amount = Column(Float, nullable=False, default=0.0)
    kind = Column(String, nullable=False, default=Kind.DEBIT.value)
    tag = Column(String, nullable=False)
    date = Column(String, nullable=False, index=True)

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, source={self.source!r}, amount={self.amount!r}, "
            f"kind={self.kind!r}, tag={self.tag!r}, date={self.date!r})"
        )


class RecurringEntry(Base):
    """Template materialized into one transaction per calendar month."""

    __tablename__ = "recurring_entries"

    id = Column(Integer, primary_key=True, index=True)
    source = Column(String, nullable=False, default="")
    amount = Column(Float, nullable=False, default=0.0)
    kind = Column(String, nullable=False, default=Kind.DEBIT.value)
    tag = Column(String, nullable=False)
    # ``YYYY-MM`` of the last materialization; empty means never
    last_inserted_month = Column(String, nullable=False, default="")
    active = Column(Boolean, nullable=False, default=True)

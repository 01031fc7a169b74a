"""Data models and type aliases for ``statement_ledger``.

The central record is :class:`Transaction`, an immutable, normalized view of
one statement line regardless of whether it came from a CSV export, a PDF
statement, or an oracle reading of a screenshot. Derived aggregates
(:class:`CurrencySummary`, :class:`StatementSummary`) are recomputed from a
transaction set and never persisted.

Pydantic models at the bottom validate data crossing a trust boundary: oracle
replies and the on-disk ledger file.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Core record
# ---------------------------------------------------------------------------

type RecurringPeriod = Literal["weekly", "monthly", "yearly"]

DEFAULT_CURRENCY: str = "USD"
SUPPORTED_CURRENCIES: tuple[str, ...] = ("USD", "PKR", "EUR", "GBP")
MAX_DESCRIPTION_LENGTH: int = 100
MIN_DESCRIPTION_LENGTH: int = 2


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single normalized, categorized statement entry.

    Attributes
    ----------
    id:
        Convenience key unique per extraction event
        (``<source_file>-<row index>-<epoch millis>``). Not a dedup key.
    date:
        ``YYYY-MM-DD`` when the raw token could be parsed; otherwise the raw
        token, preserved unmodified.
    description:
        Trimmed, whitespace-collapsed, at most 100 characters, at least 2.
    amount:
        Signed float; negative is an expense, positive is income or a credit.
    currency:
        ISO-like code, ``USD`` unless the content says otherwise.
    category:
        One of the fixed category labels (see :mod:`statement_ledger.categories`).
    source_file:
        Name of the originating file; used for grouping, removal and dedup.
    is_recurring / recurring_period:
        Set only by :func:`statement_ledger.recurring.detect_recurring`.
    """

    id: str
    date: str
    description: str
    amount: float
    currency: str = DEFAULT_CURRENCY
    category: str = "Other"
    source_file: str = ""
    is_recurring: bool = False
    recurring_period: RecurringPeriod | None = None

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not math.isfinite(self.amount):
            raise ValueError(f"Transaction.amount must be a finite number, got {self.amount!r}")
        if len(self.description.strip()) < MIN_DESCRIPTION_LENGTH:
            raise ValueError("Transaction.description must have at least 2 characters")

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def month(self) -> str:
        """``YYYY-MM`` bucket key (first seven characters of ``date``)."""
        return self.date[:7]

    def with_category(self, category: str) -> Transaction:
        return replace(self, category=category)

    def with_recurrence(self, period: RecurringPeriod | None) -> Transaction:
        return replace(self, is_recurring=period is not None, recurring_period=period)


type Transactions = Sequence[Transaction]
"""An ordered collection of transactions (a batch or the full ledger)."""


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


class MerchantTotal(NamedTuple):
    """Total spent at one approximate merchant (first three description words)."""

    name: str
    total: float


@dataclass(frozen=True, slots=True)
class CurrencySummary:
    """Spending aggregates for the transactions of a single currency."""

    currency: str
    transaction_count: int
    total_spent: float
    total_income: float
    category_breakdown: Mapping[str, float]
    monthly_spending: Mapping[str, float]
    top_merchants: tuple[MerchantTotal, ...]


@dataclass(frozen=True, slots=True)
class StatementSummary:
    """Per-currency aggregates plus the primary currency for legacy consumers.

    The single-currency properties (``total_spent`` and friends) read from the
    primary currency's summary and are zero/empty for an empty set.
    """

    transaction_count: int
    currencies: Mapping[str, CurrencySummary] = field(default_factory=dict)
    primary_currency: str = DEFAULT_CURRENCY

    @property
    def primary(self) -> CurrencySummary | None:
        return self.currencies.get(self.primary_currency)

    @property
    def total_spent(self) -> float:
        p = self.primary
        return p.total_spent if p else 0.0

    @property
    def total_income(self) -> float:
        p = self.primary
        return p.total_income if p else 0.0

    @property
    def category_breakdown(self) -> Mapping[str, float]:
        p = self.primary
        return p.category_breakdown if p else {}

    @property
    def monthly_spending(self) -> Mapping[str, float]:
        p = self.primary
        return p.monthly_spending if p else {}

    @property
    def top_merchants(self) -> tuple[MerchantTotal, ...]:
        p = self.primary
        return p.top_merchants if p else ()


# ---------------------------------------------------------------------------
# Boundary DTOs (pydantic)
# ---------------------------------------------------------------------------


class OracleTransaction(BaseModel):
    """One element of the JSON array an oracle returns for a screenshot.

    Only shape is validated here; date/description/category normalization is
    applied afterwards by the same helpers the text extractors use.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    date: str
    description: str
    amount: float
    currency: str = DEFAULT_CURRENCY

    @field_validator("amount")
    @classmethod
    def _amount_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("amount must be finite")
        return v

    @field_validator("currency")
    @classmethod
    def _currency_upper(cls, v: str) -> str:
        code = v.strip().upper()
        return code if code in SUPPORTED_CURRENCIES else DEFAULT_CURRENCY


class StoredTransaction(BaseModel):
    """Typed view of a transaction inside the ledger JSON file."""

    model_config = ConfigDict(extra="forbid")

    id: str
    date: str
    description: str
    amount: float
    currency: str
    category: str
    source_file: str
    is_recurring: bool = False
    recurring_period: RecurringPeriod | None = None

    @classmethod
    def from_transaction(cls, tx: Transaction) -> StoredTransaction:
        return cls(
            id=tx.id,
            date=tx.date,
            description=tx.description,
            amount=tx.amount,
            currency=tx.currency,
            category=tx.category,
            source_file=tx.source_file,
            is_recurring=tx.is_recurring,
            recurring_period=tx.recurring_period,
        )

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=self.id,
            date=self.date,
            description=self.description,
            amount=self.amount,
            currency=self.currency,
            category=self.category,
            source_file=self.source_file,
            is_recurring=self.is_recurring,
            recurring_period=self.recurring_period,
        )


class LedgerFile(BaseModel):
    """Top-level schema of a saved ledger."""

    model_config = ConfigDict(extra="forbid")

    schema_version: int
    transactions: list[StoredTransaction]


__all__ = [
    "DEFAULT_CURRENCY",
    "SUPPORTED_CURRENCIES",
    "MAX_DESCRIPTION_LENGTH",
    "MIN_DESCRIPTION_LENGTH",
    "RecurringPeriod",
    "Transaction",
    "Transactions",
    "MerchantTotal",
    "CurrencySummary",
    "StatementSummary",
    "OracleTransaction",
    "StoredTransaction",
    "LedgerFile",
]

"""Fold a transaction set into per-currency spending aggregates."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from .models import (
    DEFAULT_CURRENCY,
    CurrencySummary,
    MerchantTotal,
    StatementSummary,
    Transaction,
)

TOP_MERCHANTS_LIMIT: int = 10
_MERCHANT_TOKENS: int = 3


def merchant_name(description: str) -> str:
    """Approximate merchant identity: the first three whitespace tokens."""

    return " ".join(description.split()[:_MERCHANT_TOKENS])


def _add(bucket: dict[str, float], key: str, value: float) -> None:
    bucket[key] = bucket.get(key, 0.0) + value


def summarize_currency(currency: str, transactions: Sequence[Transaction]) -> CurrencySummary:
    """Aggregate transactions that are all in ``currency``.

    Spending figures (``total_spent``, category and month breakdowns, top
    merchants) use ``|amount|`` of negative amounts only; ``total_income``
    sums positive amounts.
    """

    spent = 0.0
    income = 0.0
    by_category: dict[str, float] = {}
    by_month: dict[str, float] = {}
    by_merchant: dict[str, float] = {}
    for tx in transactions:
        if tx.is_expense:
            value = abs(tx.amount)
            spent += value
            _add(by_category, tx.category, value)
            _add(by_month, tx.month, value)
            _add(by_merchant, merchant_name(tx.description), value)
        elif tx.amount > 0:
            income += tx.amount

    # sorted() is stable, so equal totals keep encounter order
    ranked = sorted(by_merchant.items(), key=lambda kv: kv[1], reverse=True)
    top = tuple(MerchantTotal(name, total) for name, total in ranked[:TOP_MERCHANTS_LIMIT])

    return CurrencySummary(
        currency=currency,
        transaction_count=len(transactions),
        total_spent=spent,
        total_income=income,
        category_breakdown=by_category,
        monthly_spending=by_month,
        top_merchants=top,
    )


def summarize(transactions: Iterable[Transaction]) -> StatementSummary:
    """Group by currency and aggregate each group.

    The primary currency is the one with the most transactions; ties go to
    the currency encountered first. An empty set yields an empty summary with
    ``USD`` as primary currency.
    """

    groups: dict[str, list[Transaction]] = {}
    for tx in transactions:
        groups.setdefault(tx.currency, []).append(tx)

    if not groups:
        return StatementSummary(
            transaction_count=0, currencies={}, primary_currency=DEFAULT_CURRENCY
        )

    counts = Counter({cur: len(items) for cur, items in groups.items()})
    primary = counts.most_common(1)[0][0]
    currencies = {cur: summarize_currency(cur, items) for cur, items in groups.items()}
    return StatementSummary(
        transaction_count=sum(counts.values()),
        currencies=currencies,
        primary_currency=primary,
    )


__all__ = ["TOP_MERCHANTS_LIMIT", "merchant_name", "summarize_currency", "summarize"]

"""Policy filter applied after extraction.

Extractors stay format-focused; whether a candidate counts as real activity is
decided here. A candidate is rejected when its description carries a
failure/decline/pending keyword, or, in ``spending_only`` mode, when its
amount is positive.
"""

from __future__ import annotations

from collections.abc import Iterable

from .logging_setup import get_logger
from .models import Transaction

_logger = get_logger("statement_ledger.validity")

FAILURE_KEYWORDS: tuple[str, ...] = (
    "failed",
    "declined",
    "pending",
    "reversed",
    "insufficient",
    "cancelled",
    "canceled",
    "voided",
    "rejected",
    "unsuccessful",
)


def has_failure_keyword(description: str) -> bool:
    lowered = description.lower()
    return any(k in lowered for k in FAILURE_KEYWORDS)


def is_valid_transaction(tx: Transaction, *, spending_only: bool = False) -> bool:
    """Return True when ``tx`` should be kept."""

    if has_failure_keyword(tx.description):
        return False
    if spending_only and tx.amount > 0:
        return False
    return True


def filter_valid(
    transactions: Iterable[Transaction], *, spending_only: bool = False
) -> list[Transaction]:
    """Keep valid transactions in their original order."""

    kept: list[Transaction] = []
    rejected = 0
    for tx in transactions:
        if is_valid_transaction(tx, spending_only=spending_only):
            kept.append(tx)
        else:
            rejected += 1
    _logger.debug(
        "validity:done kept=%d rejected=%d spending_only=%s", len(kept), rejected, spending_only
    )
    return kept


__all__ = ["FAILURE_KEYWORDS", "has_failure_keyword", "is_valid_transaction", "filter_valid"]

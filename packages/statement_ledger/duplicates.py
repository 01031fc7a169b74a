"""Duplicate collapsing for overlapping statement uploads.

Public surface:
- ``dedup_key``: identity of a transaction for duplicate detection.
- ``deduplicate``: drop later occurrences of an already-seen key, optionally
  seeding the seen set from transactions already in the ledger.

The key is ``date | lowercased trimmed description | amount`` and, by default,
``| currency``. Without the currency component a USD 15.00 charge and a PKR
15.00 charge on the same day with the same text would collapse into one;
``include_currency=False`` restores the narrower key.
"""

from __future__ import annotations

from collections.abc import Iterable

from .logging_setup import get_logger
from .models import Transaction

_logger = get_logger("statement_ledger.duplicates")

type DedupKey = tuple[str, ...]


def _amount_token(amount: float) -> str:
    # repr round-trips the float exactly
    return repr(float(amount))


def dedup_key(tx: Transaction, *, include_currency: bool = True) -> DedupKey:
    parts = (tx.date, tx.description.strip().lower(), _amount_token(tx.amount))
    if include_currency:
        return (*parts, tx.currency)
    return parts


def deduplicate(
    transactions: Iterable[Transaction],
    *,
    existing: Iterable[Transaction] = (),
    include_currency: bool = True,
) -> list[Transaction]:
    """Return ``transactions`` without duplicates, first occurrence wins.

    Items whose key matches anything in ``existing`` are dropped as well;
    ``existing`` itself is not part of the result. Idempotent:
    ``deduplicate(deduplicate(s)) == deduplicate(s)``.
    """

    seen: set[DedupKey] = {dedup_key(t, include_currency=include_currency) for t in existing}
    out: list[Transaction] = []
    dropped = 0
    for tx in transactions:
        key = dedup_key(tx, include_currency=include_currency)
        if key in seen:
            dropped += 1
            continue
        seen.add(key)
        out.append(tx)
    if dropped:
        _logger.debug("duplicates:dropped count=%d kept=%d", dropped, len(out))
    return out


__all__ = ["DedupKey", "dedup_key", "deduplicate"]

"""In-memory transaction set with explicit persistence.

The ledger owns the current set of transactions. Every mutation builds a new
tuple and swaps it in, so a reader never observes a half-applied batch.

Atomicity on disk: ``save`` writes ``<path>.tmp`` first and then
``os.replace``-s it into place. The file is JSON validated by
:class:`~statement_ledger.models.LedgerFile` on load.
"""

from __future__ import annotations

import contextlib
import json
import os
from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from pydantic import ValidationError

from .duplicates import deduplicate
from .errors import SourceReadError
from .logging_setup import get_logger
from .models import LedgerFile, StatementSummary, StoredTransaction, Transaction
from .recurring import detect_recurring
from .recurring import source_files as _source_files
from .summary import summarize
from .validity import filter_valid

SCHEMA_VERSION: int = 1

_logger = get_logger("statement_ledger.ledger")


class Ledger:
    """Current transaction set plus the batch operations that change it.

    Parameters
    ----------
    transactions:
        Initial contents, taken as-is (no filtering or dedup).
    dedupe:
        Deduplicate each incoming batch against itself and the existing set.
    include_currency:
        Whether currency is part of the duplicate key.
    """

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        *,
        dedupe: bool = True,
        include_currency: bool = True,
    ) -> None:
        self._items: tuple[Transaction, ...] = tuple(transactions)
        self.dedupe = dedupe
        self.include_currency = include_currency

    def __len__(self) -> int:
        return len(self._items)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._items

    def add_batch(self, transactions: Iterable[Transaction]) -> list[Transaction]:
        """Filter, dedupe and append one upload; return what was added."""

        batch = filter_valid(transactions)
        if self.dedupe:
            batch = deduplicate(
                batch, existing=self._items, include_currency=self.include_currency
            )
        self._items = (*self._items, *batch)
        _logger.info("ledger:add_batch added=%d total=%d", len(batch), len(self._items))
        return batch

    def remove_source(self, source_file: str) -> int:
        """Drop every transaction that came from ``source_file``; return the count."""

        kept = tuple(t for t in self._items if t.source_file != source_file)
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed

    def reset(self) -> None:
        self._items = ()

    def source_files(self) -> list[str]:
        return _source_files(self._items)

    def summary(self) -> StatementSummary:
        return summarize(self._items)

    def mark_recurring(self) -> int:
        """Flag recurring charges in place; return how many were flagged."""

        self._items = tuple(detect_recurring(self._items))
        return sum(1 for t in self._items if t.is_recurring)

    # ---- Persistence -------------------------------------------------------

    def save(self, path: str | PathLike[str]) -> Path:
        p = Path(path)
        tmp = p.with_suffix(p.suffix + ".tmp")
        doc = LedgerFile(
            schema_version=SCHEMA_VERSION,
            transactions=[StoredTransaction.from_transaction(t) for t in self._items],
        )
        try:
            tmp.write_text(
                json.dumps(doc.model_dump(mode="json"), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            os.replace(tmp, p)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise
        _logger.info("ledger:saved path=%s count=%d", os.fspath(p), len(self._items))
        return p

    @classmethod
    def load(cls, path: str | PathLike[str], **kwargs: bool) -> Ledger:
        """Read a ledger saved by :meth:`save`.

        Raises :class:`SourceReadError` when the file is missing, not valid
        JSON, fails validation, or has an unknown ``schema_version``.
        """

        p = Path(path)
        try:
            parsed = LedgerFile.model_validate_json(p.read_text(encoding="utf-8"))
        except OSError as e:
            raise SourceReadError(p.name, e.strerror or str(e)) from e
        except (UnicodeDecodeError, ValidationError) as e:
            raise SourceReadError(p.name, f"invalid ledger file ({e.__class__.__name__})") from e
        if parsed.schema_version != SCHEMA_VERSION:
            raise SourceReadError(
                p.name, f"unsupported schema_version {parsed.schema_version}"
            )
        try:
            items = [s.to_transaction() for s in parsed.transactions]
        except ValueError as e:
            raise SourceReadError(p.name, f"invalid transaction ({e})") from e
        return cls(items, **kwargs)


__all__ = ["SCHEMA_VERSION", "Ledger"]

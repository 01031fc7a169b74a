"""CSV statement exports → :class:`~statement_ledger.models.Transaction`.

No column order or naming is assumed. Column roles are inferred from the
header alone (:func:`infer_column_roles`), case-insensitively, first matching
header wins:

- date: header containing ``date`` or ``posted``;
- description: header containing ``description``, ``merchant``, ``payee`` or
  ``transaction`` (the date column is never reused as description, so a
  ``Transaction Date`` header does not shadow a later ``Description``);
- amount: a ``debit``/``credit`` column pair when both exist, otherwise the
  first header containing ``amount``, ``debit``, ``credit`` or ``value``.

Parsing follows RFC 4180 via the stdlib :mod:`csv` module. The sign found in
the file is preserved; with a debit/credit pair a debit becomes negative and a
credit positive. Rows missing a role value, or whose amount does not parse,
are dropped without failing the batch.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from io import StringIO

from .amounts import infer_currency, parse_amount_cell
from .categories import match_category
from .dates import normalize_date
from .logging_setup import get_logger
from .models import MIN_DESCRIPTION_LENGTH, Transaction
from .text_rows import clean_description, extraction_stamp, make_transaction_id

_logger = get_logger("statement_ledger.normalizers")

_DATE_HINTS: tuple[str, ...] = ("date", "posted")
_DESCRIPTION_HINTS: tuple[str, ...] = ("description", "merchant", "payee", "transaction")
_AMOUNT_HINTS: tuple[str, ...] = ("amount", "debit", "credit", "value")

type CsvRow = Mapping[str, str]


# ---------------------------------------------------------------------------
# Column role inference
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ColumnRoles:
    """Header names chosen for each role (``None`` when unresolved)."""

    date: str | None = None
    description: str | None = None
    amount: str | None = None
    debit: str | None = None
    credit: str | None = None

    @property
    def split_amount(self) -> bool:
        """True when amounts come from separate debit and credit columns."""
        return self.debit is not None and self.credit is not None

    @property
    def resolved(self) -> bool:
        has_amount = self.split_amount or self.amount is not None
        return self.date is not None and self.description is not None and has_amount


def _first_header(
    headers: Sequence[str], hints: Sequence[str], *, exclude: Sequence[str | None] = ()
) -> str | None:
    for h in headers:
        if h in exclude:
            continue
        lowered = h.lower()
        if any(hint in lowered for hint in hints):
            return h
    return None


def infer_column_roles(headers: Sequence[str]) -> ColumnRoles:
    """Infer column roles from header names only (independent of data rows)."""

    date = _first_header(headers, _DATE_HINTS)
    description = _first_header(headers, _DESCRIPTION_HINTS, exclude=(date,))
    debit = _first_header(headers, ("debit",))
    credit = _first_header(headers, ("credit",), exclude=(debit,))
    if debit is not None and credit is not None:
        return ColumnRoles(date=date, description=description, debit=debit, credit=credit)
    amount = _first_header(headers, _AMOUNT_HINTS, exclude=(date, description))
    return ColumnRoles(date=date, description=description, amount=amount)


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------


def _read_csv_rows(csv_text: str) -> tuple[list[str], list[dict[str, str]]]:
    with StringIO(csv_text) as f:
        reader = csv.DictReader(f)
        headers = [h for h in (reader.fieldnames or []) if h is not None]
        rows: list[dict[str, str]] = []
        for row in reader:
            # DictReader collects surplus cells under a None key; drop them.
            rows.append({k: (v if v is not None else "") for k, v in row.items() if k is not None})
        return headers, rows


def _cell_or_zero(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return 0.0
    return parse_amount_cell(raw)


def resolve_amount(row: CsvRow, roles: ColumnRoles) -> float:
    """Return the signed amount for ``row``; raises ``ValueError`` if unusable."""

    if roles.split_amount:
        debit = _cell_or_zero(row.get(roles.debit or ""))
        credit = _cell_or_zero(row.get(roles.credit or ""))
        if abs(debit) > 0:
            return -abs(debit)
        if abs(credit) > 0:
            return abs(credit)
        return 0.0
    if roles.amount is None:
        raise ValueError("no amount column")
    return parse_amount_cell(row.get(roles.amount, ""))


def row_to_transaction(
    row: CsvRow,
    roles: ColumnRoles,
    *,
    index: int,
    source_file: str,
    stamp: int,
) -> Transaction | None:
    """Map one CSV row to a transaction, or ``None`` when it cannot be used."""

    if not roles.resolved:
        return None
    raw_date = (row.get(roles.date or "") or "").strip()
    if not raw_date:
        return None
    description = clean_description(row.get(roles.description or "") or "")
    if len(description) < MIN_DESCRIPTION_LENGTH:
        return None
    try:
        amount = resolve_amount(row, roles)
    except ValueError:
        return None

    return Transaction(
        id=make_transaction_id(source_file, index, stamp),
        date=normalize_date(raw_date),
        description=description,
        amount=amount,
        currency=infer_currency(" ".join(v for v in row.values() if v)),
        category=match_category(description),
        source_file=source_file,
    )


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


class CSVNormalizer:
    """Normalize CSV statement text into transactions.

    Usage
    -----
    txs = CSVNormalizer.normalize(csv_text=..., source_file="jan.csv")
    """

    @staticmethod
    def normalize(
        *, csv_text: str, source_file: str, stamp: int | None = None
    ) -> list[Transaction]:
        headers, rows = _read_csv_rows(csv_text)
        roles = infer_column_roles(headers)
        if not roles.resolved:
            _logger.debug(
                "normalizers:unresolved_columns source=%s headers=%s", source_file, headers
            )
            return []
        return list(_iter_transactions(rows, roles, source_file=source_file, stamp=stamp))


def _iter_transactions(
    rows: list[dict[str, str]],
    roles: ColumnRoles,
    *,
    source_file: str,
    stamp: int | None,
) -> Iterator[Transaction]:
    run_stamp = stamp if stamp is not None else extraction_stamp()
    dropped = 0
    for index, r in enumerate(rows):
        if all((v or "").strip() == "" for v in r.values()):
            continue
        tx = row_to_transaction(r, roles, index=index, source_file=source_file, stamp=run_stamp)
        if tx is None:
            dropped += 1
            continue
        yield tx
    _logger.debug(
        "normalizers:done source=%s rows=%d dropped=%d", source_file, len(rows), dropped
    )


__all__ = [
    "ColumnRoles",
    "CSVNormalizer",
    "infer_column_roles",
    "resolve_amount",
    "row_to_transaction",
]

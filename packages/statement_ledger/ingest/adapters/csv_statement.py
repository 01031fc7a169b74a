"""Adapter for CSV statement exports.

Decodes the file, hands it to :class:`~statement_ledger.normalizers.CSVNormalizer`
and keeps the sign found in the file. Rows with failure keywords are removed;
income rows stay.
"""

from __future__ import annotations

import csv

from ...errors import SourceReadError
from ...models import Transaction
from ...normalizers import CSVNormalizer
from ...validity import filter_valid
from ..utils import StatementSource, decode_text


def extract_csv(source: StatementSource) -> list[Transaction]:
    text = decode_text(source)
    try:
        candidates = CSVNormalizer.normalize(csv_text=text, source_file=source.name)
    except csv.Error as e:
        raise SourceReadError(source.name, f"malformed CSV ({e})") from e
    return filter_valid(candidates, spending_only=False)


__all__ = ["extract_csv"]

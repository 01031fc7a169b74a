"""Line-oriented transaction extraction for PDF and freeform statement text.

Each non-blank line is tried independently:

1. lines shorter than ``SkipRules.min_length`` or matching a skip pattern
   (statement metadata, footers, page markers, table headers) are dropped;
2. a date is located (:func:`statement_ledger.dates.extract_date`);
3. an amount is located in the rest of the line
   (:func:`statement_ledger.amounts.extract_amount`);
4. what is left, minus the amount and any currency code, is the description;
5. the sign convention of the pipeline is applied;
6. the description is categorized by keyword.

A line that fails any step yields nothing. Those misses are routine and are
only counted at DEBUG level.
"""

from __future__ import annotations

import re
import time
from collections.abc import Iterable
from dataclasses import dataclass

from .amounts import CURRENCY_CODE_RE, extract_amount
from .categories import match_category
from .dates import extract_date
from .logging_setup import get_logger
from .models import MAX_DESCRIPTION_LENGTH, MIN_DESCRIPTION_LENGTH, Transaction

_logger = get_logger("statement_ledger.text_rows")

DEFAULT_SKIP_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"document\s+number",
        r"statement\s+period",
        r"statement\s+date",
        r"date\s+issued",
        r"card\s+number",
        r"account\s+number",
        r"client\s+number",
        r"consolidated",
        r"^date\s+description",
        r"transaction\s+amount$",
        r"redotpay\.com",
        r"red\s+dot\s+technology",
        r"queen.*road.*central",
        r"room\s+\d+",
        r"^\d+\s*/\s*\d+$",
        r"^page\s+\d+(\s+of\s+\d+)?$",
        r"(opening|closing|previous|new)\s+balance",
        r"balance\s+(brought|carried)\s+forward",
    )
)


@dataclass(frozen=True, slots=True)
class SkipRules:
    """Configuration for dropping non-transactional lines before parsing."""

    patterns: tuple[re.Pattern[str], ...] = DEFAULT_SKIP_PATTERNS
    min_length: int = 5

    def should_skip(self, line: str) -> bool:
        if len(line) < self.min_length:
            return True
        return any(p.search(line) for p in self.patterns)


DEFAULT_SKIP_RULES = SkipRules()

_LEADING_DASH_RE = re.compile(r"^\s*[-–—]\s*")


def clean_description(text: str) -> str:
    """Collapse whitespace, drop a leading dash and cap the length."""

    s = _LEADING_DASH_RE.sub("", text)
    s = " ".join(s.split())
    return s[:MAX_DESCRIPTION_LENGTH].rstrip()


def extraction_stamp() -> int:
    """Millisecond timestamp shared by all rows of one extraction run."""

    return time.time_ns() // 1_000_000


def make_transaction_id(source_file: str, index: int, stamp: int) -> str:
    return f"{source_file}-{index}-{stamp}"


def extract_row(
    line: str,
    *,
    index: int,
    source_file: str,
    stamp: int,
    force_expense: bool = True,
    skip_rules: SkipRules = DEFAULT_SKIP_RULES,
) -> Transaction | None:
    """Turn one line into a transaction, or ``None`` when it is not one.

    With ``force_expense`` (the tabular statement convention), the stored
    amount is negative unless the line carried an explicit ``+`` sign.
    """

    text = line.strip()
    if not text or skip_rules.should_skip(text):
        return None

    found_date = extract_date(text)
    if found_date is None:
        return None
    remainder = found_date.remainder

    found_amount = extract_amount(remainder)
    if found_amount is None:
        return None

    rest = found_amount.strip_from(remainder)
    rest = CURRENCY_CODE_RE.sub(" ", rest, count=1)
    description = clean_description(rest)
    if len(description) < MIN_DESCRIPTION_LENGTH:
        return None

    amount = found_amount.value
    if force_expense:
        amount = abs(amount) if found_amount.explicit_sign == "+" else -abs(amount)

    return Transaction(
        id=make_transaction_id(source_file, index, stamp),
        date=found_date.iso,
        description=description,
        amount=amount,
        currency=found_amount.currency,
        category=match_category(description),
        source_file=source_file,
    )


def extract_transactions_from_lines(
    lines: Iterable[str],
    source_file: str,
    *,
    force_expense: bool = True,
    skip_rules: SkipRules = DEFAULT_SKIP_RULES,
    stamp: int | None = None,
) -> list[Transaction]:
    """Run :func:`extract_row` over ``lines`` and keep the hits, in order."""

    run_stamp = stamp if stamp is not None else extraction_stamp()
    out: list[Transaction] = []
    seen = 0
    for index, line in enumerate(lines):
        seen += 1
        tx = extract_row(
            line,
            index=index,
            source_file=source_file,
            stamp=run_stamp,
            force_expense=force_expense,
            skip_rules=skip_rules,
        )
        if tx is not None:
            out.append(tx)

    _logger.debug(
        "text_rows:done source=%s lines=%d extracted=%d skipped=%d",
        source_file,
        seen,
        len(out),
        seen - len(out),
    )
    return out


def extract_transactions_from_text(
    text: str,
    source_file: str,
    *,
    force_expense: bool = True,
    skip_rules: SkipRules = DEFAULT_SKIP_RULES,
    stamp: int | None = None,
) -> list[Transaction]:
    """Split ``text`` on newlines and extract one candidate per line."""

    return extract_transactions_from_lines(
        text.splitlines(),
        source_file,
        force_expense=force_expense,
        skip_rules=skip_rules,
        stamp=stamp,
    )


__all__ = [
    "DEFAULT_SKIP_PATTERNS",
    "DEFAULT_SKIP_RULES",
    "SkipRules",
    "clean_description",
    "extraction_stamp",
    "make_transaction_id",
    "extract_row",
    "extract_transactions_from_lines",
    "extract_transactions_from_text",
]

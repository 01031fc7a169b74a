"""Monetary token recognition, sign inference and currency inference.

Two entry points:

- :func:`extract_amount` locates the first monetary token inside a line of
  statement text (optional sign, optional currency symbol, digit groups with
  optional thousands separators, exactly two decimals).
- :func:`parse_amount_cell` parses a single CSV cell, tolerating currency
  symbols, codes, thousands separators and accounting parentheses.

Currency inference (:func:`infer_currency`) is independent from the numeric
parse and short-circuits: PKR indicators first, then an explicit currency
code, then a currency symbol, then ``USD``.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Literal, NamedTuple

from .models import DEFAULT_CURRENCY

AMOUNT_RE = re.compile(
    r"(?P<sign>[-+])?\s?"
    r"(?P<symbol>[$€£]|Rs\.?|PKR)?\s?"
    r"(?P<number>\d[\d,]*\.\d{2})(?!\d)"
)

CURRENCY_CODE_RE = re.compile(r"\b(USD|PKR|EUR|GBP)\b", re.IGNORECASE)

_PKR_HINT_RE = re.compile(r"pkr|\bRs\.|\brs\s", re.IGNORECASE)
_DEBIT_HINT_RE = re.compile(r"debit|payment|withdrawal", re.IGNORECASE)
_SYMBOL_CURRENCY: dict[str, str] = {"€": "EUR", "£": "GBP"}

type Sign = Literal["+", "-"]


class AmountMatch(NamedTuple):
    """A monetary token located inside a line.

    ``explicit_sign`` is the sign character written in the text (``None`` when
    the token was unsigned); ``value`` already has the inferred sign applied.
    ``start``/``end`` delimit the matched substring.
    """

    value: float
    currency: str
    explicit_sign: Sign | None
    start: int
    end: int

    def strip_from(self, text: str) -> str:
        """Return ``text`` with the matched token removed."""
        return (text[: self.start] + " " + text[self.end :]).strip()


def infer_currency(text: str) -> str:
    """Infer the currency code for a line or serialized row."""

    if _PKR_HINT_RE.search(text):
        return "PKR"
    code = CURRENCY_CODE_RE.search(text)
    if code:
        return code.group(1).upper()
    for symbol, currency in _SYMBOL_CURRENCY.items():
        if symbol in text:
            return currency
    return DEFAULT_CURRENCY


def has_debit_marker(text: str) -> bool:
    """True when the text says the movement is a debit/payment/withdrawal."""

    return bool(_DEBIT_HINT_RE.search(text))


def extract_amount(text: str, *, context: str | None = None) -> AmountMatch | None:
    """Locate and parse the first monetary token in ``text``.

    Parameters
    ----------
    text:
        The string to scan (typically a line with its date already removed).
    context:
        Wider text used for sign and currency inference; defaults to ``text``.

    Returns ``None`` when no token is present or the numeric parse fails.
    """

    m = AMOUNT_RE.search(text)
    if m is None:
        return None
    try:
        magnitude = float(m.group("number").replace(",", ""))
    except ValueError:
        return None
    if not math.isfinite(magnitude):
        return None

    scope = context if context is not None else text
    sign: Sign | None = m.group("sign")  # type: ignore[assignment]
    if sign == "-":
        value = -magnitude
    elif sign is None and has_debit_marker(scope):
        value = -magnitude
    else:
        value = magnitude

    return AmountMatch(
        value=value,
        currency=infer_currency(scope),
        explicit_sign=sign,
        start=m.start(),
        end=m.end(),
    )


_CELL_PREFIXES: tuple[str, ...] = ("$", "€", "£", "Rs.", "Rs", "PKR", "USD", "EUR", "GBP")


def _to_decimal(raw: str) -> Decimal:
    s = raw.strip()
    if not s:
        raise ValueError("amount is empty")
    negative = False

    # Strip sign, currency markers and surrounding parentheses in any order
    # until stable, so "-($1,234.56)" and "$(1,234.56)" both parse.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        for prefix in _CELL_PREFIXES:
            if s.upper().startswith(prefix.upper()):
                s = s[len(prefix) :].lstrip()
                changed = True
                break
        for suffix in _CELL_PREFIXES:
            if s.upper().endswith(suffix.upper()) and len(s) > len(suffix):
                s = s[: -len(suffix)].rstrip()
                changed = True
                break
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if s.endswith("-") and len(s) > 1:
            negative = True
            s = s[:-1].rstrip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    return -abs(d) if negative else d


def parse_amount_cell(value: object) -> float:
    """Parse one tabular cell into a float.

    Numbers are used as-is; strings are stripped of currency markers and
    thousands separators. Raises ``ValueError`` for empty or non-numeric
    values (the caller drops the row).
    """

    if isinstance(value, bool):
        raise ValueError(f"invalid amount: {value!r}")
    if isinstance(value, (int, float)):
        f = float(value)
        if not math.isfinite(f):
            raise ValueError(f"invalid amount: {value!r}")
        return f
    if not isinstance(value, str):
        raise ValueError(f"invalid amount: {value!r}")
    return float(_to_decimal(value))


__all__ = [
    "AMOUNT_RE",
    "CURRENCY_CODE_RE",
    "AmountMatch",
    "infer_currency",
    "has_debit_marker",
    "extract_amount",
    "parse_amount_cell",
]

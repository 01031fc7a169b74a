"""Date token recognition and normalization to ``YYYY-MM-DD``.

Recognition is an ordered strategy list (``DATE_PATTERNS``); the first pattern
that yields a valid calendar triple wins:

1. ``Mon DD, YYYY`` / ``Mon DD YYYY`` (whole month names or their
   abbreviations, case-insensitive; ``Marketing`` is not ``Mar``)
2. ``DD Mon YYYY``
3. ``YYYY-MM-DD`` / ``YYYY/MM/DD`` with year in [1990, 2100]
4. ``MM/DD/YYYY`` / ``MM-DD-YYYY`` and two-digit-year variants

The year bound on (3) keeps document numbers such as ``20260209-9560`` or
``2026-13-45`` from being read as dates. Two-digit years map to ``19xx`` when
greater than 50, else ``20xx``.

Every pattern checks month in [1, 12] and day in [1, 31]; a textual match that
fails the check is skipped and the scan continues with the next occurrence,
then the next pattern.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_MON = (
    r"(Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)(?:\.|\b)"
)

_ISO_YEAR_MIN = 1990
_ISO_YEAR_MAX = 2100


class DateMatch(NamedTuple):
    """Result of locating a date inside a larger string.

    ``remainder`` is the input with the matched substring removed and the
    result stripped, ready for further parsing by callers.
    """

    iso: str
    remainder: str
    raw: str


type _Triple = tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class DatePattern:
    """One recognition strategy: a regex plus a builder of ``(y, m, d)``."""

    name: str
    regex: re.Pattern[str]
    build: Callable[[re.Match[str]], _Triple | None]


def _expand_two_digit_year(token: str) -> int:
    year = int(token)
    if len(token) == 2:
        return 1900 + year if year > 50 else 2000 + year
    return year


def _valid(year: int, month: int, day: int) -> _Triple | None:
    if 1 <= month <= 12 and 1 <= day <= 31:
        return (year, month, day)
    return None


def _build_mon_dd_yyyy(m: re.Match[str]) -> _Triple | None:
    return _valid(int(m.group(3)), _MONTHS[m.group(1)[:3].lower()], int(m.group(2)))


def _build_dd_mon_yyyy(m: re.Match[str]) -> _Triple | None:
    return _valid(int(m.group(3)), _MONTHS[m.group(2)[:3].lower()], int(m.group(1)))


def _build_iso(m: re.Match[str]) -> _Triple | None:
    year = int(m.group(1))
    if not (_ISO_YEAR_MIN <= year <= _ISO_YEAR_MAX):
        return None
    return _valid(year, int(m.group(2)), int(m.group(3)))


def _build_month_first(m: re.Match[str]) -> _Triple | None:
    return _valid(_expand_two_digit_year(m.group(3)), int(m.group(1)), int(m.group(2)))


DATE_PATTERNS: tuple[DatePattern, ...] = (
    DatePattern(
        "mon_dd_yyyy",
        re.compile(rf"\b{_MON}\s+(\d{{1,2}}),?\s+(\d{{4}})\b", re.IGNORECASE),
        _build_mon_dd_yyyy,
    ),
    DatePattern(
        "dd_mon_yyyy",
        re.compile(rf"\b(\d{{1,2}})\s+{_MON},?\s+(\d{{4}})\b", re.IGNORECASE),
        _build_dd_mon_yyyy,
    ),
    DatePattern(
        "iso",
        re.compile(r"\b(\d{4})[/-](\d{1,2})[/-](\d{1,2})\b"),
        _build_iso,
    ),
    DatePattern(
        "month_first",
        re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})\b"),
        _build_month_first,
    ),
)


def _format(triple: _Triple) -> str:
    year, month, day = triple
    return f"{year:04d}-{month:02d}-{day:02d}"


def extract_date(
    text: str, patterns: tuple[DatePattern, ...] = DATE_PATTERNS
) -> DateMatch | None:
    """Locate the highest-priority date in ``text``.

    Returns ``None`` when no pattern produces a valid date; callers treat that
    line as non-transactional.
    """

    for pattern in patterns:
        for m in pattern.regex.finditer(text):
            triple = pattern.build(m)
            if triple is None:
                continue
            remainder = (text[: m.start()] + " " + text[m.end() :]).strip()
            return DateMatch(iso=_format(triple), remainder=remainder, raw=m.group(0))
    return None


def normalize_date(raw: str) -> str:
    """Lenient normalization for a standalone date cell.

    Returns ``YYYY-MM-DD`` when any pattern matches; otherwise ``raw`` is
    returned unmodified so rows in unanticipated formats are not lost.
    """

    found = extract_date(raw.strip())
    return found.iso if found is not None else raw


__all__ = [
    "DateMatch",
    "DatePattern",
    "DATE_PATTERNS",
    "extract_date",
    "normalize_date",
]

"""Recurring-charge detection and daily activity analysis.

These run over an already-built transaction set and never change extraction
results other than the ``is_recurring`` / ``recurring_period`` flags.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from .logging_setup import get_logger
from .models import RecurringPeriod, Transaction

_logger = get_logger("statement_ledger.recurring")

_KEY_DESCRIPTION_CHARS = 15

# (period, inclusive lower bound, inclusive upper bound) on the mean gap in days
_PERIOD_WINDOWS: tuple[tuple[RecurringPeriod, float, float], ...] = (
    ("monthly", 25, 35),
    ("weekly", 6, 8),
    ("yearly", 360, 370),
)


def _parse_day(value: str) -> dt.date | None:
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        return None


def recurrence_key(tx: Transaction) -> str:
    """Group key: description prefix, whole-unit amount and currency."""

    whole = int(abs(tx.amount) + 0.5)
    return f"{tx.description.lower()[:_KEY_DESCRIPTION_CHARS]}|{whole}|{tx.currency}"


def classify_interval(mean_days: float) -> RecurringPeriod | None:
    for period, low, high in _PERIOD_WINDOWS:
        if low <= mean_days <= high:
            return period
    return None


def _flagged(tx: Transaction, period: RecurringPeriod | None) -> Transaction:
    if tx.recurring_period == period and tx.is_recurring == (period is not None):
        return tx
    return tx.with_recurrence(period)


def detect_recurring(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Return the set sorted by date with recurring members flagged.

    Transactions are grouped by :func:`recurrence_key`; a group of two or more
    whose mean gap between consecutive dates falls into a period window marks
    all its members with that period; every other dated transaction has its
    recurring flags cleared. Transactions whose date is not a valid
    ISO date cannot be placed on the timeline and are appended unchanged after
    the dated ones.
    """

    dated: list[tuple[dt.date, Transaction]] = []
    undated: list[Transaction] = []
    for tx in transactions:
        day = _parse_day(tx.date)
        if day is None:
            undated.append(tx)
        else:
            dated.append((day, tx))
    dated.sort(key=lambda pair: pair[0])

    groups: dict[str, list[int]] = {}
    for pos, (_day, tx) in enumerate(dated):
        groups.setdefault(recurrence_key(tx), []).append(pos)

    periods: dict[int, RecurringPeriod] = {}
    for members in groups.values():
        if len(members) < 2:
            continue
        gaps = [
            (dated[members[i]][0] - dated[members[i - 1]][0]).days
            for i in range(1, len(members))
        ]
        period = classify_interval(sum(gaps) / len(gaps))
        if period is None:
            continue
        for pos in members:
            periods[pos] = period

    out = [_flagged(tx, periods.get(pos)) for pos, (_day, tx) in enumerate(dated)]
    out.extend(undated)
    _logger.debug(
        "recurring:done total=%d recurring=%d undated=%d", len(out), len(periods), len(undated)
    )
    return out


class HeatmapDay(NamedTuple):
    date: str
    count: int
    total: float
    intensity: int


def _intensity(total: float, max_total: float) -> int:
    if total <= 0 or max_total <= 0:
        return 0
    ratio = total / max_total
    if ratio > 0.8:
        return 4
    if ratio > 0.6:
        return 3
    if ratio > 0.4:
        return 2
    return 1


def daily_heatmap(transactions: Iterable[Transaction]) -> list[HeatmapDay]:
    """Per-day expense count and total with a 0-4 intensity, sorted by date."""

    daily: dict[str, list[float]] = {}
    for tx in transactions:
        if not tx.is_expense:
            continue
        daily.setdefault(tx.date, []).append(abs(tx.amount))
    if not daily:
        return []

    totals = {day: sum(values) for day, values in daily.items()}
    max_total = max(totals.values())
    return [
        HeatmapDay(
            date=day,
            count=len(daily[day]),
            total=totals[day],
            intensity=_intensity(totals[day], max_total),
        )
        for day in sorted(daily)
    ]


def source_files(transactions: Sequence[Transaction]) -> list[str]:
    """Sorted distinct source file names."""

    return sorted({tx.source_file for tx in transactions})


__all__ = [
    "HeatmapDay",
    "recurrence_key",
    "classify_interval",
    "detect_recurring",
    "daily_heatmap",
    "source_files",
]

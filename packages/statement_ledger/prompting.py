"""Prompt construction and reply parsing for the oracle.

This module builds:
- the categorization prompts (one ``index|description|amount|currency`` line
  per transaction, reply is a JSON array of labels);
- the narrative summary prompts from per-currency and per-category totals;
- the screenshot extraction prompts;
- :func:`extract_json_array`, which pulls the first well-formed JSON array out
  of a free-text reply.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from .categories import ALLOWED_CATEGORIES
from .models import Transaction

# ---- Categorization ------------------------------------------------------------


def build_categorize_system() -> str:
    return (
        "You categorize bank transactions. Reply with ONLY a JSON array of category "
        "strings, one per transaction, in the same order.\n"
        f"Categories: {', '.join(ALLOWED_CATEGORIES)}\n"
        "Choose the single best category for each transaction based on the merchant "
        "name/description."
    )


def format_categorize_line(index: int, tx: Transaction) -> str:
    return f"{index}|{tx.description}|{abs(tx.amount):g}|{tx.currency}"


def build_categorize_user(transactions: Sequence[Transaction]) -> str:
    """List the page with page-relative indices (0..n-1)."""

    lines = "\n".join(format_categorize_line(i, t) for i, t in enumerate(transactions))
    return (
        f"Categorize these {len(transactions)} transactions "
        f"(format: index|description|amount|currency):\n{lines}"
    )


# ---- Narrative summary ---------------------------------------------------------


def format_money(value: float, currency: str) -> str:
    if currency == "PKR":
        return f"Rs {value:.0f}"
    if currency == "USD":
        return f"${value:.2f}"
    return f"{value:.2f} {currency}"


def build_summary_system() -> str:
    return (
        "You analyze personal bank statements. Give a concise, insightful spending summary.\n"
        "Be specific about patterns, biggest expenses, and actionable suggestions.\n"
        "Use a friendly but direct tone. Format with markdown. Keep it under 300 words."
    )


def build_summary_user(transactions: Sequence[Transaction]) -> str:
    """Describe totals per currency, per category, the date range and each expense."""

    expenses = [t for t in transactions if t.amount < 0]

    spent_by_currency: dict[str, float] = {}
    by_category: dict[str, dict[str, float]] = {}
    for t in expenses:
        value = abs(t.amount)
        spent_by_currency[t.currency] = spent_by_currency.get(t.currency, 0.0) + value
        per_cur = by_category.setdefault(t.category, {})
        per_cur[t.currency] = per_cur.get(t.currency, 0.0) + value

    dates = sorted(t.date for t in transactions)
    totals = " + ".join(
        f"{format_money(v, cur)} {cur}" for cur, v in spent_by_currency.items()
    ) or "no spending"
    category_lines = "\n".join(
        f"- {cat}: " + " + ".join(format_money(v, cur) for cur, v in per_cur.items())
        for cat, per_cur in by_category.items()
    )
    item_lines = "\n".join(
        f"{t.date} | {t.description} | {abs(t.amount):g} {t.currency} | {t.category}"
        for t in expenses
    )
    return (
        f"Analyze this statement ({dates[0]} to {dates[-1]}):\n"
        f"Total: {totals} across {len(transactions)} transactions.\n\n"
        f"Category breakdown:\n{category_lines}\n\n"
        f"All transactions:\n{item_lines}"
    )


# ---- Screenshot extraction -----------------------------------------------------


def build_image_system() -> str:
    return (
        "You read screenshots of bank and card statements and transcribe the "
        "transactions they show. Never invent transactions that are not visible."
    )


def build_image_user() -> str:
    return (
        "Extract every transaction in this image. Reply with ONLY a JSON array of objects "
        'with the keys "date" (YYYY-MM-DD), "description", "amount" and "currency" '
        "(USD, PKR, EUR or GBP). Use negative amounts for expenses and positive amounts "
        "for credits or income."
    )


# ---- Reply parsing -------------------------------------------------------------


def extract_json_array(text: str) -> list[Any] | None:
    """Return the first well-formed JSON array embedded in ``text``.

    Scans each ``[`` in order and attempts a JSON decode from there; prose or
    code fences around the array are ignored. Returns ``None`` when no
    position decodes to a list.
    """

    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            value, _end = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, list):
            return value
        start = text.find("[", start + 1)
    return None


__all__ = [
    "build_categorize_system",
    "build_categorize_user",
    "format_categorize_line",
    "format_money",
    "build_summary_system",
    "build_summary_user",
    "build_image_system",
    "build_image_user",
    "extract_json_array",
]

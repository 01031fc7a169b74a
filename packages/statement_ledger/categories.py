"""Spending categories and keyword-based category matching.

Exports
-------
- ``ALLOWED_CATEGORIES``: the closed set of category labels (display order).
- ``CATEGORY_RULES``: ordered keyword rules. Matching is first-match-wins over
  this order, so the order is part of the contract: a description such as
  ``"Netflix Subscription"`` lands in ``Entertainment`` because that rule is
  evaluated before ``Subscriptions & Software``.
- ``match_category(...)``: map a description to a label (``Other`` fallback).
- ``normalize_name(...)`` / ``is_known_category(...)``: helpers shared with
  the oracle enrichment path to validate labels returned by a model.
"""

from __future__ import annotations

from dataclasses import dataclass

OTHER: str = "Other"

ALLOWED_CATEGORIES: tuple[str, ...] = (
    "Food & Dining",
    "Shopping",
    "Transportation",
    "Bills & Utilities",
    "Entertainment",
    "Health & Medical",
    "Travel",
    "Education",
    "Groceries",
    "Subscriptions & Software",
    "Gaming",
    "Transfer",
    "Income",
    OTHER,
)


@dataclass(frozen=True, slots=True)
class CategoryRule:
    label: str
    keywords: tuple[str, ...]


# Evaluation order == tuple order. Keywords are lowercase substrings.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        "Food & Dining",
        (
            "restaurant", "cafe", "coffee", "food", "pizza", "burger", "kfc",
            "mcdonald", "starbucks", "doordash", "ubereats", "grubhub", "diner",
            "eatery", "kitchen", "bakers", "bakery", "sweet", "creme", "seasons foods",
        ),
    ),
    CategoryRule(
        "Shopping",
        (
            "amazon", "walmart", "target", "costco", "ebay", "shop", "store",
            "retail", "mall", "clothing", "fashion", "apparel", "daraz", "mart",
            "citi mart", "super mart",
        ),
    ),
    CategoryRule(
        "Transportation",
        (
            "uber", "lyft", "gas", "fuel", "shell", "bp", "chevron", "exxon",
            "parking", "toll", "metro", "bus", "train", "transit", "railway", "aramco",
        ),
    ),
    CategoryRule(
        "Bills & Utilities",
        (
            "electric", "water", "gas", "internet", "phone", "mobile", "verizon",
            "at&t", "comcast", "spectrum", "utility", "bill",
        ),
    ),
    CategoryRule(
        "Entertainment",
        ("netflix", "spotify", "hulu", "disney", "hbo", "movie", "cinema", "theater"),
    ),
    CategoryRule(
        "Gaming",
        ("pubg", "pubgmobile", "game", "playstation", "xbox", "steam", "twitch", "epic games"),
    ),
    CategoryRule(
        "Subscriptions & Software",
        (
            "cursor", "perplexity", "canva", "typefully", "render.com", "google cloud",
            "google one", "chatgpt", "claude", "moonshot", "nanonoble", "openai", "anthropic",
        ),
    ),
    CategoryRule(
        "Health & Medical",
        (
            "pharmacy", "doctor", "hospital", "clinic", "medical", "dental", "health",
            "cvs", "walgreens", "medicine",
        ),
    ),
    CategoryRule(
        "Travel",
        (
            "hotel", "airbnb", "flight", "airline", "delta", "united", "american airlines",
            "southwest", "marriott", "hilton", "booking", "expedia",
        ),
    ),
    CategoryRule(
        "Education",
        (
            "school", "university", "college", "tuition", "course", "udemy", "coursera",
            "book", "library",
        ),
    ),
    CategoryRule(
        "Groceries",
        (
            "grocery", "supermarket", "whole foods", "trader joe", "kroger", "safeway",
            "aldi", "walmart grocery",
        ),
    ),
    CategoryRule(
        "Transfer",
        ("transfer", "venmo", "zelle", "paypal", "cash app", "wire", "ach"),
    ),
    CategoryRule(
        "Income",
        (
            "payroll", "paycheck", "salary", "direct deposit", "refund", "cashback",
            "dividend", "interest",
        ),
    ),
)

_ALLOWED_SET: frozenset[str] = frozenset(ALLOWED_CATEGORIES)


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``.

    Case is preserved.
    """

    return " ".join(name.strip().split())


def is_known_category(label: object) -> bool:
    """True when ``label`` is exactly one of :data:`ALLOWED_CATEGORIES`."""

    return isinstance(label, str) and label in _ALLOWED_SET


def match_category(description: str, rules: tuple[CategoryRule, ...] = CATEGORY_RULES) -> str:
    """Return the first rule label whose keyword occurs in ``description``.

    Comparison is a case-insensitive substring test. Returns ``"Other"`` when
    no rule matches.
    """

    lowered = description.lower()
    for rule in rules:
        if any(keyword in lowered for keyword in rule.keywords):
            return rule.label
    return OTHER


__all__ = [
    "OTHER",
    "ALLOWED_CATEGORIES",
    "CategoryRule",
    "CATEGORY_RULES",
    "normalize_name",
    "is_known_category",
    "match_category",
]

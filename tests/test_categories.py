import pytest

from statement_ledger.categories import (
    ALLOWED_CATEGORIES,
    CATEGORY_RULES,
    CategoryRule,
    is_known_category,
    match_category,
)


def test_rule_evaluation_order_is_pinned() -> None:
    assert [r.label for r in CATEGORY_RULES] == [
        "Food & Dining",
        "Shopping",
        "Transportation",
        "Bills & Utilities",
        "Entertainment",
        "Gaming",
        "Subscriptions & Software",
        "Health & Medical",
        "Travel",
        "Education",
        "Groceries",
        "Transfer",
        "Income",
    ]


def test_every_rule_label_is_an_allowed_category() -> None:
    assert all(r.label in ALLOWED_CATEGORIES for r in CATEGORY_RULES)
    assert "Other" in ALLOWED_CATEGORIES


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Netflix Subscription", "Entertainment"),
        ("STARBUCKS #1234", "Food & Dining"),
        ("Paycheck", "Income"),
        ("Steam Games", "Gaming"),
        ("ChatGPT Plus", "Subscriptions & Software"),
        ("Zelle to John", "Transfer"),
        ("Completely unknown merchant", "Other"),
    ],
)
def test_match_category(description: str, expected: str) -> None:
    assert match_category(description) == expected


def test_first_match_wins_over_later_rules() -> None:
    # "pizza" (Food & Dining) is evaluated before "uber" (Transportation).
    assert match_category("Uber Pizza Delivery") == "Food & Dining"


def test_custom_rules_replace_the_table() -> None:
    rules = (CategoryRule("Travel", ("ticket",)), CategoryRule("Education", ("ticket",)))
    assert match_category("Concert TICKET", rules) == "Travel"
    assert match_category("Coffee", rules) == "Other"


def test_is_known_category() -> None:
    assert is_known_category("Groceries")
    assert not is_known_category("groceries")
    assert not is_known_category(3)

import pytest

from statement_ledger.models import Transaction
from statement_ledger.summary import merchant_name, summarize


def _tx(
    description: str,
    amount: float,
    *,
    category: str = "Other",
    currency: str = "USD",
    date: str = "2026-02-07",
) -> Transaction:
    return Transaction(
        id=f"{description}-{amount}",
        date=date,
        description=description,
        amount=amount,
        currency=currency,
        category=category,
        source_file="s.csv",
    )


def test_two_food_expenses() -> None:
    s = summarize([_tx("Cafe A", -10, category="Food"), _tx("Cafe B", -5, category="Food")])
    assert s.category_breakdown["Food"] == 15
    assert s.total_spent == 15
    assert s.total_income == 0
    assert s.primary_currency == "USD"
    assert s.transaction_count == 2


def test_income_excluded_from_spending_breakdowns() -> None:
    s = summarize(
        [
            _tx("Salary", 3000, category="Income", date="2026-01-31"),
            _tx("Rent", -1200, category="Bills & Utilities", date="2026-02-01"),
            _tx("Groceries Mart", -80.5, category="Groceries", date="2026-01-10"),
        ]
    )
    assert s.total_income == pytest.approx(3000)
    assert s.total_spent == pytest.approx(1280.5)
    assert "Income" not in s.category_breakdown
    assert dict(s.monthly_spending) == {
        "2026-02": pytest.approx(1200),
        "2026-01": pytest.approx(80.5),
    }


def test_groups_by_currency_and_picks_primary_by_count() -> None:
    s = summarize(
        [
            _tx("Coffee", -4, currency="USD"),
            _tx("Foodpanda order", -900, currency="PKR"),
            _tx("Daraz order", -1500, currency="PKR"),
        ]
    )
    assert s.primary_currency == "PKR"
    assert set(s.currencies) == {"USD", "PKR"}
    assert s.currencies["USD"].total_spent == 4
    assert s.total_spent == 2400


def test_primary_currency_tie_goes_to_first_seen() -> None:
    pkr_first = [
        _tx("Foodpanda order", -900, currency="PKR"),
        _tx("Coffee", -4, currency="USD"),
        _tx("Daraz order", -1500, currency="PKR"),
        _tx("Tea", -3, currency="USD"),
    ]
    assert summarize(pkr_first).primary_currency == "PKR"
    assert summarize(pkr_first[::-1]).primary_currency == "USD"


def test_top_merchants_by_first_three_tokens_with_stable_ties() -> None:
    txs = [
        _tx("Amazon Marketplace Order 111", -20),
        _tx("Uber Trip Help", -30),
        _tx("Amazon Marketplace Order 222", -10),
        _tx("Lyft Ride Home", -30),
    ]
    names = [m.name for m in summarize(txs).top_merchants]
    assert names == ["Amazon Marketplace Order", "Uber Trip Help", "Lyft Ride Home"]


def test_top_merchants_capped_at_ten() -> None:
    txs = [_tx(f"Shop {i}", -(i + 1)) for i in range(15)]
    top = summarize(txs).top_merchants
    assert len(top) == 10
    assert top[0].name == "Shop 14"


def test_empty_set() -> None:
    s = summarize([])
    assert s.transaction_count == 0
    assert s.total_spent == 0
    assert s.top_merchants == ()
    assert s.primary_currency == "USD"


def test_merchant_name() -> None:
    assert merchant_name("  NETFLIX.COM   LOS GATOS CA ") == "NETFLIX.COM LOS GATOS"

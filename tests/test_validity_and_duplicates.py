import pytest

from statement_ledger.duplicates import dedup_key, deduplicate
from statement_ledger.models import Transaction
from statement_ledger.validity import filter_valid, is_valid_transaction


def _tx(
    description: str,
    amount: float,
    *,
    date: str = "2026-02-07",
    currency: str = "USD",
    source_file: str = "a.pdf",
    idx: int = 0,
) -> Transaction:
    return Transaction(
        id=f"{source_file}-{idx}-1",
        date=date,
        description=description,
        amount=amount,
        currency=currency,
        source_file=source_file,
    )


@pytest.mark.parametrize(
    "description",
    [
        "Card payment FAILED",
        "Declined - insufficient funds",
        "Pending authorization",
        "Reversed charge",
        "Order cancelled",
        "Voided txn",
        "Rejected transfer",
    ],
)
def test_failure_keywords_reject(description: str) -> None:
    assert not is_valid_transaction(_tx(description, -5.0))


def test_spending_only_rejects_positive_amounts() -> None:
    credit = _tx("Refund", 5.0)
    assert is_valid_transaction(credit)
    assert not is_valid_transaction(credit, spending_only=True)
    assert is_valid_transaction(_tx("Coffee", -5.0), spending_only=True)


def test_filter_valid_keeps_order() -> None:
    items = [_tx("Coffee", -3.0), _tx("Pending", -1.0), _tx("Lunch", -9.0)]
    assert [t.description for t in filter_valid(items)] == ["Coffee", "Lunch"]


def test_overlapping_uploads_collapse_to_one() -> None:
    first = [_tx("Netflix Subscription", -15.99, source_file="jan.pdf")]
    second = [
        _tx("  netflix subscription ", -15.99, source_file="feb.pdf"),
        _tx("Spotify", -9.99, source_file="feb.pdf", idx=1),
    ]
    merged = deduplicate(second, existing=first)
    assert [t.description for t in merged] == ["Spotify"]
    assert len(deduplicate([*first, *second])) == 2


def test_first_occurrence_wins() -> None:
    a = _tx("Coffee", -3.0, idx=0)
    b = _tx("coffee", -3.0, idx=1)
    assert deduplicate([a, b]) == [a]


def test_deduplicate_is_idempotent() -> None:
    items = [
        _tx("Coffee", -3.0),
        _tx("Coffee", -3.0, idx=1),
        _tx("Coffee", -3.0, date="2026-02-08"),
        _tx("Tea", -3.0),
    ]
    once = deduplicate(items)
    assert deduplicate(once) == once
    assert len(once) == 3


def test_currency_is_part_of_the_key_by_default() -> None:
    usd = _tx("Transfer fee", -15.0, currency="USD")
    pkr = _tx("Transfer fee", -15.0, currency="PKR")
    assert dedup_key(usd) != dedup_key(pkr)
    assert deduplicate([usd, pkr]) == [usd, pkr]
    assert deduplicate([usd, pkr], include_currency=False) == [usd]

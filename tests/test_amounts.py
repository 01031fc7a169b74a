import pytest

from statement_ledger.amounts import extract_amount, infer_currency, parse_amount_cell


def test_signed_amount_with_thousands_separator() -> None:
    found = extract_amount("Rent payment -1,234.56")
    assert found is not None
    assert found.value == pytest.approx(-1234.56)
    assert found.explicit_sign == "-"


def test_unsigned_amount_with_debit_marker_is_negative() -> None:
    found = extract_amount("ATM withdrawal 40.00")
    assert found is not None
    assert found.value == pytest.approx(-40.0)
    assert found.explicit_sign is None


def test_unsigned_amount_without_marker_stays_positive() -> None:
    found = extract_amount("Coffee Shop 4.50")
    assert found is not None
    assert found.value == pytest.approx(4.5)


def test_explicit_plus_sign_is_recorded() -> None:
    found = extract_amount("Refund +12.00")
    assert found is not None
    assert found.explicit_sign == "+"
    assert found.value == pytest.approx(12.0)


def test_currency_symbol_is_stripped_and_span_removable() -> None:
    found = extract_amount("Book store $25.00 USD")
    assert found is not None
    assert found.value == pytest.approx(25.0)
    assert found.currency == "USD"
    assert found.strip_from("Book store $25.00 USD") == "Book store  USD".strip()


def test_two_decimals_are_required() -> None:
    assert extract_amount("Order 12345 shipped") is None
    assert extract_amount("Total 12.5") is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Foodpanda Rs. 1,200.00", "PKR"),
        ("Transfer PKR 500.00", "PKR"),
        ("rs 300.00 mobile load", "PKR"),
        ("Hotel 120.00 EUR", "EUR"),
        ("Taxi £15.00", "GBP"),
        ("Lunch €9.50", "EUR"),
        ("Coffee 4.50", "USD"),
        # "rs" inside a word is not a rupee marker
        ("Chargers 20.00", "USD"),
    ],
)
def test_infer_currency(text: str, expected: str) -> None:
    assert infer_currency(text) == expected


@pytest.mark.parametrize(
    ("cell", "expected"),
    [
        ("1,234.56", 1234.56),
        ("$1,234.56", 1234.56),
        ("-$12.00", -12.0),
        ("($45.10)", -45.1),
        ("12.00-", -12.0),
        ("PKR 2,500", 2500.0),
        ("15.99 USD", 15.99),
        (42, 42.0),
        (3.5, 3.5),
    ],
)
def test_parse_amount_cell(cell: object, expected: float) -> None:
    assert parse_amount_cell(cell) == pytest.approx(expected)


@pytest.mark.parametrize("cell", ["", "   ", "n/a", "NaN", "inf", True, None, float("nan")])
def test_parse_amount_cell_rejects_non_numbers(cell: object) -> None:
    with pytest.raises(ValueError):
        parse_amount_cell(cell)

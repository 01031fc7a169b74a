import pytest

from statement_ledger.dates import DATE_PATTERNS, extract_date, normalize_date


@pytest.mark.parametrize(
    "raw",
    ["Feb 07, 2026", "07 Feb 2026", "02/07/2026", "2026-02-07", "feb 7 2026", "2026/2/7"],
)
def test_common_formats_normalize_to_iso(raw: str) -> None:
    assert normalize_date(raw) == "2026-02-07"


def test_pattern_priority_is_explicit_and_ordered() -> None:
    assert [p.name for p in DATE_PATTERNS] == ["mon_dd_yyyy", "dd_mon_yyyy", "iso", "month_first"]


def test_month_name_wins_over_numeric_date_on_same_line() -> None:
    found = extract_date("01/02/2026 posted Mar 03, 2026 coffee")
    assert found is not None
    assert found.iso == "2026-03-03"


def test_remainder_has_date_removed() -> None:
    found = extract_date("02/07/2026 Netflix Subscription -15.99")
    assert found is not None
    assert found.iso == "2026-02-07"
    assert found.remainder == "Netflix Subscription -15.99"
    assert found.raw == "02/07/2026"


def test_two_digit_year_window() -> None:
    assert normalize_date("02/07/99") == "1999-02-07"
    assert normalize_date("02/07/26") == "2026-02-07"
    assert normalize_date("02/07/50") == "2050-02-07"


def test_document_numbers_are_not_iso_dates() -> None:
    # Out-of-range year and month/day are rejected rather than clamped.
    assert extract_date("Document 2026-13-45 issued") is None
    assert extract_date("ref 3026-01-01") is None


def test_invalid_occurrence_is_skipped_for_later_valid_one() -> None:
    found = extract_date("13/45/2026 then 01/15/2026 Coffee 3.50")
    assert found is not None
    assert found.iso == "2026-01-15"


def test_no_date_returns_none_and_lenient_normalize_keeps_raw() -> None:
    assert extract_date("Coffee shop 4.50") is None
    assert normalize_date("sometime in spring") == "sometime in spring"


def test_words_starting_with_a_month_are_not_month_names() -> None:
    found = extract_date("02/07/2026 Marketing 12 2026 retainer 5.00")
    assert found is not None
    assert found.iso == "2026-02-07"
    assert found.remainder == "Marketing 12 2026 retainer 5.00"

    found = extract_date("Decathlon 3 2026 store 03/15/2026")
    assert found is not None
    assert found.iso == "2026-03-15"


@pytest.mark.parametrize(
    "raw, iso",
    [
        ("February 7, 2026", "2026-02-07"),
        ("Feb. 7, 2026", "2026-02-07"),
        ("7 Sept 2026", "2026-09-07"),
        ("07 december 2026", "2026-12-07"),
    ],
)
def test_full_and_dotted_month_names(raw: str, iso: str) -> None:
    assert normalize_date(raw) == iso

from statement_ledger.models import Transaction
from statement_ledger.recurring import daily_heatmap, detect_recurring, source_files


def _tx(description: str, amount: float, date: str, *, source_file: str = "s.csv") -> Transaction:
    return Transaction(
        id=f"{description}-{date}",
        date=date,
        description=description,
        amount=amount,
        source_file=source_file,
    )


def test_monthly_subscription_is_flagged() -> None:
    txs = [
        _tx("NETFLIX.COM LOS GATOS 123", -15.99, "2026-03-07"),
        _tx("NETFLIX.COM LOS GATOS 456", -15.99, "2026-01-07"),
        _tx("NETFLIX.COM LOS GATOS 789", -15.99, "2026-02-07"),
        _tx("Coffee", -4.0, "2026-02-01"),
    ]
    out = detect_recurring(txs)
    assert [t.date for t in out] == ["2026-01-07", "2026-02-01", "2026-02-07", "2026-03-07"]
    flagged = [t for t in out if t.is_recurring]
    assert len(flagged) == 3
    assert {t.recurring_period for t in flagged} == {"monthly"}
    # Input objects are not mutated.
    assert not any(t.is_recurring for t in txs)


def test_weekly_and_yearly_windows() -> None:
    weekly = [_tx("Gym class", -10, d) for d in ("2026-01-01", "2026-01-08", "2026-01-15")]
    yearly = [_tx("Domain renewal", -12, d) for d in ("2025-01-10", "2026-01-12")]
    out = detect_recurring([*weekly, *yearly])
    periods = {t.description: t.recurring_period for t in out}
    assert periods == {"Gym class": "weekly", "Domain renewal": "yearly"}


def test_irregular_group_and_singletons_are_not_flagged() -> None:
    txs = [
        _tx("Hardware store", -50, "2026-01-01"),
        _tx("Hardware store", -50, "2026-01-15"),
        _tx("Bakery", -5, "2026-01-02"),
    ]
    assert not any(t.is_recurring for t in detect_recurring(txs))


def test_non_iso_dates_pass_through_at_the_end() -> None:
    odd = _tx("Coffee", -3, "sometime")
    out = detect_recurring([odd, _tx("Tea", -2, "2026-01-01")])
    assert out[-1] is odd


def test_daily_heatmap_intensity() -> None:
    txs = [
        _tx("A1", -100, "2026-01-02"),
        _tx("B1", -50, "2026-01-01"),
        _tx("B2", -20, "2026-01-01"),
        _tx("C1", -10, "2026-01-03"),
        _tx("Salary", 5000, "2026-01-03"),
    ]
    days = daily_heatmap(txs)
    assert [(d.date, d.count, d.total, d.intensity) for d in days] == [
        ("2026-01-01", 2, 70, 3),
        ("2026-01-02", 1, 100, 4),
        ("2026-01-03", 1, 10, 1),
    ]


def test_daily_heatmap_empty_without_expenses() -> None:
    assert daily_heatmap([_tx("Salary", 10, "2026-01-01")]) == []


def test_source_files_sorted_distinct() -> None:
    txs = [
        _tx("Aa", -1, "2026-01-01", source_file="b.csv"),
        _tx("Bb", -1, "2026-01-01", source_file="a.pdf"),
        _tx("Cc", -1, "2026-01-01", source_file="b.csv"),
    ]
    assert source_files(txs) == ["a.pdf", "b.csv"]


def test_stale_flags_are_cleared_when_a_group_shrinks() -> None:
    txs = [
        _tx("Gym membership", -30, "2026-01-05", source_file="jan.pdf"),
        _tx("Gym membership", -30, "2026-02-05", source_file="feb.pdf"),
    ]
    flagged = detect_recurring(txs)
    assert all(t.is_recurring for t in flagged)

    remaining = [t for t in flagged if t.source_file == "feb.pdf"]
    (again,) = detect_recurring(remaining)
    assert not again.is_recurring
    assert again.recurring_period is None


def test_unchanged_transactions_keep_identity() -> None:
    coffee = _tx("Coffee", -4, "2026-01-01")
    assert detect_recurring([coffee])[0] is coffee

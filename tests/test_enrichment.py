import json

import pytest

from statement_ledger.enrichment import (
    ai_categorize,
    ai_summarize,
    extract_from_image,
    parse_image_reply,
)
from statement_ledger.errors import OracleError, OracleUnavailableError
from statement_ledger.models import Transaction
from statement_ledger.prompting import extract_json_array

from tests.helpers.oracle_stub import OracleStub, parse_categorize_lines


def _tx(description: str, amount: float, category: str = "Other", idx: int = 0) -> Transaction:
    return Transaction(
        id=f"s-{idx}-1",
        date="2026-02-07",
        description=description,
        amount=amount,
        category=category,
        source_file="s.pdf",
    )


@pytest.fixture
def batch() -> list[Transaction]:
    return [
        _tx("Netflix Subscription", -15.99, "Entertainment", 0),
        _tx("ACME 123", -42.00, "Other", 1),
        _tx("Mystery vendor", -8.00, "Other", 2),
    ]


def test_no_oracle_or_empty_batch_returns_input_object(batch: list[Transaction]) -> None:
    assert ai_categorize(batch, None) is batch
    empty: list[Transaction] = []
    assert ai_categorize(empty, OracleStub(lambda d: "Other")) is empty


def test_oracle_failure_keeps_keyword_categories(batch: list[Transaction]) -> None:
    stub = OracleStub(error=OracleError("429 Too Many Requests"))
    out = ai_categorize(batch, stub)
    assert out is batch
    assert [t.category for t in out] == ["Entertainment", "Other", "Other"]


def test_unknown_labels_rejected_per_element(batch: list[Transaction]) -> None:
    labels = {"Netflix Subscription": "Made Up", "ACME 123": "Shopping", "Mystery vendor": 7}
    out = ai_categorize(batch, OracleStub(lambda d: labels[d]))
    assert [t.category for t in out] == ["Entertainment", "Shopping", "Other"]
    assert out[0] is batch[0]
    assert out[2] is batch[2]
    assert out[1].amount == batch[1].amount


def test_length_mismatch_rejects_the_page(batch: list[Transaction]) -> None:
    stub = OracleStub(reply='["Shopping", "Shopping"]')
    out = ai_categorize(batch, stub)
    assert [t.category for t in out] == [t.category for t in batch]


def test_pages_are_sent_with_page_relative_indices() -> None:
    txs = [_tx(f"Vendor {i}", -1.0 - i, idx=i) for i in range(5)]
    stub = OracleStub(lambda d: "Shopping")
    out = ai_categorize(txs, stub, page_size=2, concurrency=2)
    assert len(stub.calls) == 3
    assert sorted(len(parse_categorize_lines(c["user"])) for c in stub.calls) == [1, 2, 2]
    for call in stub.calls:
        indices = [i for i, *_ in parse_categorize_lines(call["user"])]
        assert indices == list(range(len(indices)))
    assert [t.description for t in out] == [t.description for t in txs]
    assert {t.category for t in out} == {"Shopping"}


def test_categorize_request_lines_use_absolute_amounts(batch: list[Transaction]) -> None:
    stub = OracleStub(lambda d: "Other")
    ai_categorize(batch, stub)
    lines = parse_categorize_lines(stub.calls[0]["user"])
    assert lines[0] == (0, "Netflix Subscription", "15.99", "USD")


def test_summary_success_and_failure(batch: list[Transaction]) -> None:
    ok = ai_summarize(batch, OracleStub(reply="## You spent a lot"))
    assert ok == "## You spent a lot"
    failed = ai_summarize(batch, OracleStub(error=OracleError("quota exceeded")))
    assert failed == "Summary unavailable: quota exceeded"
    assert ai_summarize(batch, None) is None
    assert ai_summarize([], OracleStub(reply="x")) is None


def test_summary_prompt_mentions_totals_and_range(batch: list[Transaction]) -> None:
    stub = OracleStub(reply="ok")
    ai_summarize(batch, stub)
    user = stub.calls[0]["user"]
    assert "2026-02-07 to 2026-02-07" in user
    assert "$65.99 USD" in user
    assert "Netflix Subscription" in user


def test_image_reply_is_validated_per_element() -> None:
    reply = "Sure! ```json\n" + json.dumps(
        [
            {"date": "Feb 07, 2026", "description": "Netflix", "amount": -15.99, "currency": "usd"},
            {"date": "2026-02-08", "description": "Salary", "amount": "2500", "currency": "XYZ"},
            {"date": "2026-02-09", "description": "Bad amount", "amount": "lots"},
            {"description": "No date", "amount": -1},
            {"date": "2026-02-10", "description": " ", "amount": -1},
        ]
    ) + "\n```"
    txs = parse_image_reply(reply, "shot.png", stamp=5)
    assert [(t.date, t.description, t.amount, t.currency) for t in txs] == [
        ("2026-02-07", "Netflix", -15.99, "USD"),
        ("2026-02-08", "Salary", 2500.0, "USD"),
    ]
    assert txs[0].category == "Entertainment"
    assert txs[0].id == "shot.png-0-5"


def test_image_reply_without_array_yields_nothing() -> None:
    assert parse_image_reply("I cannot read this image.", "shot.png") == []


def test_extract_from_image_requires_and_propagates_oracle() -> None:
    with pytest.raises(OracleUnavailableError):
        extract_from_image(b"\x89PNG", "shot.png", None)
    with pytest.raises(OracleError):
        extract_from_image(b"\x89PNG", "shot.png", OracleStub(error=RuntimeError("boom")))


def test_extract_from_image_sends_bytes_and_mime() -> None:
    stub = OracleStub(image_reply="[]")
    assert extract_from_image(b"img", "shot.jpg", stub, "image/jpeg") == []
    assert stub.calls[0]["image"] == b"img"
    assert stub.calls[0]["mime"] == "image/jpeg"


def test_extract_json_array_skips_non_array_brackets() -> None:
    assert extract_json_array('note [see below] then ["Shopping", "Travel"]') == [
        "Shopping",
        "Travel",
    ]
    assert extract_json_array("no array here") is None

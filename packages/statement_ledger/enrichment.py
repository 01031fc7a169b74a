"""Optional oracle-backed enrichment: categories, narrative, screenshots.

Public API:
    - :func:`ai_categorize` (best effort, never raises)
    - :func:`ai_summarize` (best effort, failures become a placeholder string)
    - :func:`extract_from_image` (raises :class:`OracleError` for that file)

Categorization is the only step that runs over already-extracted
transactions, and it can only replace a keyword category with another label
from the fixed set. Every other field is left untouched.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from pydantic import ValidationError

from . import prompting
from .categories import is_known_category, match_category, normalize_name
from .dates import normalize_date
from .errors import OracleError, OracleUnavailableError
from .logging_setup import get_logger
from .models import MIN_DESCRIPTION_LENGTH, OracleTransaction, Transaction
from .oracle import Oracle
from .pmap import p_map
from .text_rows import clean_description, extraction_stamp, make_transaction_id

_PAGE_SIZE_DEFAULT: int = 50
_CONCURRENCY: int = 4

_logger = get_logger("statement_ledger.enrichment")


# ---- Categorization ------------------------------------------------------------


def _paginate(n_total: int, page_size: int) -> Iterable[tuple[int, int, int]]:
    """Yield ``(page_index, base, end)`` half-open ranges over ``n_total`` items."""

    for k in range(math.ceil(n_total / page_size)):
        base = k * page_size
        yield (k, base, min(base + page_size, n_total))


def apply_labels(page: Sequence[Transaction], labels: Sequence[object]) -> list[Transaction]:
    """Overlay oracle ``labels`` onto ``page`` element by element.

    A label outside the category set leaves that transaction as it was; an
    unchanged transaction is returned as the same object.
    """

    out: list[Transaction] = []
    for tx, raw in zip(page, labels, strict=True):
        label = normalize_name(raw) if isinstance(raw, str) else raw
        if is_known_category(label) and label != tx.category:
            out.append(tx.with_category(label))  # type: ignore[arg-type]
        else:
            out.append(tx)
    return out


def _categorize_page(
    oracle: Oracle, page_index: int, page: Sequence[Transaction]
) -> list[Transaction]:
    reply = oracle.complete(
        prompting.build_categorize_system(), prompting.build_categorize_user(page)
    )
    labels = prompting.extract_json_array(reply)
    if labels is None:
        raise ValueError("reply contained no JSON array")
    if len(labels) != len(page):
        raise ValueError(f"expected {len(page)} labels, got {len(labels)}")
    out = apply_labels(page, labels)
    changed = sum(1 for a, b in zip(page, out, strict=True) if a is not b)
    _logger.debug(
        "enrichment:page_done page_index=%d count=%d changed=%d", page_index, len(page), changed
    )
    return out


def ai_categorize(
    transactions: list[Transaction],
    oracle: Oracle | None,
    *,
    page_size: int = _PAGE_SIZE_DEFAULT,
    concurrency: int = _CONCURRENCY,
) -> list[Transaction]:
    """Re-assign categories in bulk through ``oracle``; best effort.

    Pages of ``page_size`` transactions are sent concurrently. A page whose
    reply is malformed, has the wrong length, or whose oracle call fails keeps
    its keyword categories. When nothing changes (including no oracle or an
    empty batch) the input list itself is returned.
    """

    if oracle is None or not transactions:
        return transactions
    if page_size < 1:
        raise ValueError("page_size must be a positive integer")

    def _run(page_spec: tuple[int, int, int]) -> list[Transaction]:
        page_index, base, end = page_spec
        page = transactions[base:end]
        try:
            return _categorize_page(oracle, page_index, page)
        except Exception as e:  # noqa: BLE001
            _logger.warning(
                "enrichment:categorize_fallback page_index=%d count=%d error=%s: %s",
                page_index,
                len(page),
                e.__class__.__name__,
                e,
            )
            return list(page)

    pages = p_map(
        list(_paginate(len(transactions), page_size)), _run, concurrency=concurrency
    )
    out = [tx for page in pages for tx in page]
    if all(a is b for a, b in zip(transactions, out, strict=True)):
        return transactions
    return out


# ---- Narrative summary ---------------------------------------------------------

SUMMARY_UNAVAILABLE_PREFIX = "Summary unavailable: "


def ai_summarize(transactions: Sequence[Transaction], oracle: Oracle | None) -> str | None:
    """Return a markdown spending narrative, or a placeholder on failure.

    ``None`` when there is no oracle or nothing to summarize.
    """

    if oracle is None or not transactions:
        return None
    try:
        return oracle.complete(
            prompting.build_summary_system(), prompting.build_summary_user(transactions)
        )
    except Exception as e:  # noqa: BLE001
        _logger.warning("enrichment:summary_failed error=%s", e.__class__.__name__)
        reason = str(e) or e.__class__.__name__
        return f"{SUMMARY_UNAVAILABLE_PREFIX}{reason}"


# ---- Screenshot extraction -----------------------------------------------------


def _to_transaction(
    item: OracleTransaction, *, index: int, source_file: str, stamp: int
) -> Transaction | None:
    description = clean_description(item.description)
    if len(description) < MIN_DESCRIPTION_LENGTH:
        return None
    return Transaction(
        id=make_transaction_id(source_file, index, stamp),
        date=normalize_date(item.date),
        description=description,
        amount=item.amount,
        currency=item.currency,
        category=match_category(description),
        source_file=source_file,
    )


def parse_image_reply(
    reply: str, source_file: str, *, stamp: int | None = None
) -> list[Transaction]:
    """Turn an oracle screenshot reply into transactions.

    A reply without a JSON array yields no transactions. Elements that fail
    validation are dropped one by one.
    """

    elements = prompting.extract_json_array(reply)
    if elements is None:
        _logger.warning("enrichment:image_no_array source=%s", source_file)
        return []

    run_stamp = stamp if stamp is not None else extraction_stamp()
    out: list[Transaction] = []
    for index, raw in enumerate(elements):
        try:
            item = OracleTransaction.model_validate(raw)
        except ValidationError:
            continue
        tx = _to_transaction(item, index=index, source_file=source_file, stamp=run_stamp)
        if tx is not None:
            out.append(tx)
    _logger.debug(
        "enrichment:image_done source=%s elements=%d extracted=%d",
        source_file,
        len(elements),
        len(out),
    )
    return out


def extract_from_image(
    image: bytes,
    source_file: str,
    oracle: Oracle | None,
    mime_type: str = "image/png",
) -> list[Transaction]:
    """Read a statement screenshot through the vision oracle.

    There is no non-oracle path for images: a missing oracle raises
    :class:`OracleUnavailableError` and a failed call raises
    :class:`OracleError`.
    """

    if oracle is None:
        raise OracleUnavailableError("image input requires an AI API key")
    try:
        reply = oracle.complete_with_image(
            prompting.build_image_system(), prompting.build_image_user(), image, mime_type
        )
    except OracleError:
        raise
    except Exception as e:  # noqa: BLE001
        raise OracleError(str(e) or e.__class__.__name__) from e
    return parse_image_reply(reply, source_file)


__all__ = [
    "SUMMARY_UNAVAILABLE_PREFIX",
    "apply_labels",
    "ai_categorize",
    "ai_summarize",
    "parse_image_reply",
    "extract_from_image",
]

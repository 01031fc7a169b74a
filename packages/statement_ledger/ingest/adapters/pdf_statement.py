"""Adapter for PDF statements and plain-text statement dumps.

PDF pages are read with ``pdfplumber``; each word box becomes a
:class:`~statement_ledger.layout.TextFragment` whose ``y`` is measured from
the bottom of the page (``page.height - bottom``), so line reconstruction
sees the PDF coordinate convention where larger ``y`` is higher on the page.

Both paths use the tabular sign rule (unsigned amounts are expenses) and keep
spending only.
"""

from __future__ import annotations

from io import BytesIO

import pdfplumber

from ...errors import SourceReadError
from ...layout import TextFragment, reconstruct_pages
from ...logging_setup import get_logger
from ...models import Transaction
from ...text_rows import extract_transactions_from_lines, extract_transactions_from_text
from ...validity import filter_valid
from ..utils import StatementSource, decode_text

_logger = get_logger("statement_ledger.ingest.pdf")


def page_fragments(page: pdfplumber.page.Page) -> list[TextFragment]:
    """Word boxes of one page as bottom-origin fragments.

    ``y`` is taken from the word's ``bottom``: words on one line share it even
    when their font sizes, and so their ``top``, differ.
    """

    height = float(page.height)
    return [
        TextFragment(text=w["text"], x=float(w["x0"]), y=height - float(w["bottom"]))
        for w in page.extract_words(keep_blank_chars=False, use_text_flow=False)
    ]


def pdf_lines(data: bytes, source_file: str) -> list[str]:
    """Reconstructed logical lines of every page, in page order."""

    try:
        with pdfplumber.open(BytesIO(data)) as pdf:
            lines = reconstruct_pages([page_fragments(page) for page in pdf.pages])
            pages = len(pdf.pages)
    except Exception as e:  # noqa: BLE001 - pdfminer raises a variety of types
        raise SourceReadError(source_file, f"cannot open PDF ({e.__class__.__name__}: {e})") from e
    _logger.debug("pdf:lines source=%s pages=%d lines=%d", source_file, pages, len(lines))
    return lines


def extract_pdf(source: StatementSource) -> list[Transaction]:
    lines = pdf_lines(source.data, source.name)
    candidates = extract_transactions_from_lines(lines, source.name, force_expense=True)
    return filter_valid(candidates, spending_only=True)


def extract_text(source: StatementSource) -> list[Transaction]:
    text = decode_text(source)
    candidates = extract_transactions_from_text(text, source.name, force_expense=True)
    return filter_valid(candidates, spending_only=True)


__all__ = ["page_fragments", "pdf_lines", "extract_pdf", "extract_text"]

"""Reconstruct logical table rows from positioned PDF text fragments.

Reading-order concatenation of a PDF's text runs interleaves unrelated
columns. Instead, fragments are grouped by their (rounded) vertical position,
rows are emitted top of page first, and fragments inside a row are ordered
left to right. Each resulting line is what :mod:`statement_ledger.text_rows`
consumes.

Coordinates follow the PDF convention: ``y`` grows upward, so the topmost row
has the largest ``y``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import NamedTuple


class TextFragment(NamedTuple):
    """A run of text with the position of its origin on the page."""

    text: str
    x: float
    y: float


def reconstruct_lines(fragments: Iterable[TextFragment]) -> list[str]:
    """Group ``fragments`` of one page into ordered logical lines.

    Whitespace-only fragments are ignored, as are rows that end up empty.
    Fragments with equal ``x`` keep their input order.
    """

    rows: dict[int, list[TextFragment]] = {}
    for frag in fragments:
        if not frag.text or not frag.text.strip():
            continue
        rows.setdefault(round(frag.y), []).append(frag)

    lines: list[str] = []
    for y in sorted(rows, reverse=True):
        ordered = sorted(rows[y], key=lambda f: f.x)
        line = " ".join(f.text for f in ordered).strip()
        if line:
            lines.append(line)
    return lines


def reconstruct_pages(pages: Sequence[Iterable[TextFragment]]) -> list[str]:
    """Reconstruct every page in order and concatenate their lines."""

    out: list[str] = []
    for page in pages:
        out.extend(reconstruct_lines(page))
    return out


__all__ = ["TextFragment", "reconstruct_lines", "reconstruct_pages"]

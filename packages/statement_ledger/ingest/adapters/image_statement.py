"""Adapter for statement screenshots, read entirely by the vision oracle."""

from __future__ import annotations

from ...enrichment import extract_from_image
from ...models import Transaction
from ...oracle import Oracle
from ...validity import filter_valid
from ..utils import StatementSource


def extract_image(source: StatementSource, oracle: Oracle | None) -> list[Transaction]:
    candidates = extract_from_image(source.data, source.name, oracle, source.mime_type)
    return filter_valid(candidates, spending_only=False)


__all__ = ["extract_image"]

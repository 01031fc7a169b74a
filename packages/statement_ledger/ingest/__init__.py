"""Per-file extraction and batch ingestion.

``extract_source`` picks the pipeline for one file by its kind:

========  ==========================================  ====================
kind      extraction                                  validity filter
========  ==========================================  ====================
csv       columnar, sign as found in the file         failure keywords
pdf       positional rows, unsigned means expense     spending only
text      line rows, unsigned means expense           spending only
image     vision oracle, sign as reported             failure keywords
========  ==========================================  ====================

``ingest_sources`` runs files concurrently and isolates failures: a file that
cannot be read, decoded or sent to the oracle becomes a :class:`FileError`
and its siblings carry on.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from ..enrichment import ai_categorize
from ..logging_setup import get_logger
from ..models import Transaction
from ..oracle import Oracle
from ..pmap import p_map_settled
from .adapters.csv_statement import extract_csv
from .adapters.image_statement import extract_image
from .adapters.pdf_statement import extract_pdf, extract_text
from .utils import SourceKind, StatementSource, decode_text, infer_kind, load_source

_CONCURRENCY: int = 4

_logger = get_logger("statement_ledger.ingest")


class FileError(NamedTuple):
    source_file: str
    message: str


class BatchResult(NamedTuple):
    transactions: list[Transaction]
    errors: list[FileError]
    file_count: int = 0

    @property
    def all_failed(self) -> bool:
        """True when there was at least one file and every file failed."""
        return self.file_count > 0 and len(self.errors) == self.file_count


def _error_message(exc: Exception) -> str:
    reason = getattr(exc, "reason", None)
    if isinstance(reason, str) and reason:
        return reason
    return str(exc) or exc.__class__.__name__


def extract_source(source: StatementSource, oracle: Oracle | None = None) -> list[Transaction]:
    """Return the validated candidate transactions of one file."""

    if source.kind == "csv":
        return extract_csv(source)
    if source.kind == "pdf":
        return extract_pdf(source)
    if source.kind == "text":
        return extract_text(source)
    if source.kind == "image":
        return extract_image(source, oracle)
    raise ValueError(f"unsupported source kind: {source.kind!r}")


def ingest_sources(
    sources: Iterable[StatementSource],
    *,
    oracle: Oracle | None = None,
    enrich: bool = True,
    concurrency: int = _CONCURRENCY,
) -> BatchResult:
    """Extract every source, optionally re-categorize through ``oracle``.

    Transactions are concatenated in source order. Per-file failures are
    logged at ERROR and returned in ``errors``.
    """

    def _one(source: StatementSource) -> list[Transaction]:
        txs = extract_source(source, oracle)
        if enrich and oracle is not None:
            txs = ai_categorize(txs, oracle)
        _logger.info(
            "ingest:file_done source=%s kind=%s count=%d", source.name, source.kind, len(txs)
        )
        return txs

    outcomes = p_map_settled(sources, _one, concurrency=concurrency)

    transactions: list[Transaction] = []
    errors: list[FileError] = []
    for outcome in outcomes:
        if outcome.error is not None:
            _logger.error(
                "ingest:file_failed source=%s error=%s: %s",
                outcome.item.name,
                outcome.error.__class__.__name__,
                outcome.error,
            )
            errors.append(FileError(outcome.item.name, _error_message(outcome.error)))
            continue
        transactions.extend(outcome.value or [])
    return BatchResult(transactions=transactions, errors=errors, file_count=len(outcomes))


__all__ = [
    "SourceKind",
    "StatementSource",
    "FileError",
    "BatchResult",
    "decode_text",
    "infer_kind",
    "load_source",
    "extract_source",
    "ingest_sources",
]

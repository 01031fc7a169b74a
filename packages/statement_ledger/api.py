"""Public orchestration for the ``statement_ledger`` package.

This module is the stable import surface used by the CLI and by host
applications. The heavy lifting lives in the extractor, ingest, enrichment
and ledger modules; :func:`analyze_files` wires them together for the common
"upload some statements, get a ledger and a summary" flow.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from os import PathLike

from .config import OracleSettings
from .enrichment import ai_categorize, ai_summarize, extract_from_image
from .errors import SourceReadError
from .ingest import (
    BatchResult,
    FileError,
    StatementSource,
    extract_source,
    ingest_sources,
    load_source,
)
from .ledger import Ledger
from .logging_setup import get_logger
from .models import StatementSummary
from .oracle import Oracle, create_oracle

_logger = get_logger("statement_ledger.api")


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Outcome of :func:`analyze_files`."""

    ledger: Ledger
    errors: tuple[FileError, ...]
    file_count: int
    narrative: str | None = None

    @property
    def summary(self) -> StatementSummary:
        return self.ledger.summary()

    @property
    def all_failed(self) -> bool:
        return self.file_count > 0 and len(self.errors) == self.file_count


def load_sources(
    paths: Iterable[str | PathLike[str]],
) -> tuple[list[StatementSource], list[FileError]]:
    """Read every path; unreadable files become :class:`FileError` entries."""

    sources: list[StatementSource] = []
    errors: list[FileError] = []
    for path in paths:
        try:
            sources.append(load_source(path))
        except SourceReadError as e:
            _logger.error("api:read_failed source=%s reason=%s", e.source_file, e.reason)
            errors.append(FileError(e.source_file, e.reason))
    return sources, errors


def analyze_files(
    paths: Sequence[str | PathLike[str]],
    *,
    settings: OracleSettings | None = None,
    oracle: Oracle | None = None,
    use_ai: bool = True,
    dedupe: bool = True,
    narrative: bool = False,
    ledger: Ledger | None = None,
) -> AnalysisResult:
    """Ingest ``paths`` into a ledger and optionally ask for a narrative.

    An explicit ``oracle`` wins over ``settings``; with ``use_ai=False`` no
    oracle is used at all (image files then fail with a per-file error).
    """

    active: Oracle | None = None
    if use_ai:
        active = oracle if oracle is not None else (
            create_oracle(settings) if settings is not None else None
        )

    sources, read_errors = load_sources(paths)
    batch: BatchResult = ingest_sources(sources, oracle=active, enrich=use_ai)

    target = ledger if ledger is not None else Ledger(dedupe=dedupe)
    target.add_batch(batch.transactions)
    target.mark_recurring()

    text = ai_summarize(target.transactions, active) if narrative else None
    return AnalysisResult(
        ledger=target,
        errors=(*read_errors, *batch.errors),
        file_count=len(paths),
        narrative=text,
    )


__all__ = [
    "AnalysisResult",
    "load_sources",
    "analyze_files",
    # re-exports
    "ai_categorize",
    "ai_summarize",
    "extract_from_image",
    "extract_source",
    "ingest_sources",
]

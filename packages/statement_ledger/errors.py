"""Exception types raised across file and oracle boundaries.

Line-level parse misses are not errors: extractors simply yield nothing for a
line or row they cannot read. Only file-level and oracle-level failures are
represented here, since those must reach the user with the offending file name.
"""

from __future__ import annotations


class StatementLedgerError(Exception):
    """Base class for errors raised by ``statement_ledger``."""


class SourceReadError(StatementLedgerError):
    """A statement file could not be read, decoded, or opened as its format."""

    def __init__(self, source_file: str, reason: str) -> None:
        super().__init__(f"{source_file}: {reason}")
        self.source_file = source_file
        self.reason = reason


class OracleError(StatementLedgerError):
    """The completion oracle failed (network, auth, quota, or reply shape)."""


class OracleUnavailableError(OracleError):
    """An oracle is required for this input but none is configured."""


__all__ = [
    "StatementLedgerError",
    "SourceReadError",
    "OracleError",
    "OracleUnavailableError",
]

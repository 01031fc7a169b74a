"""Public interface for the ``statement_ledger`` package.

Statement files (CSV exports, PDF statements, text dumps, screenshots) go in;
a normalized, categorized and deduplicated transaction ledger comes out.
Only symbol re-exports live here.
"""

from .api import AnalysisResult, analyze_files, load_sources
from .categories import ALLOWED_CATEGORIES, CATEGORY_RULES, match_category
from .config import OracleSettings, clear_settings, load_settings, save_settings
from .dates import extract_date, normalize_date
from .duplicates import dedup_key, deduplicate
from .enrichment import ai_categorize, ai_summarize, extract_from_image
from .errors import OracleError, OracleUnavailableError, SourceReadError, StatementLedgerError
from .ingest import BatchResult, FileError, StatementSource, extract_source, ingest_sources
from .ledger import Ledger
from .models import CurrencySummary, MerchantTotal, StatementSummary, Transaction, Transactions
from .oracle import Oracle, OpenAIOracle, create_oracle
from .summary import summarize
from .validity import filter_valid, is_valid_transaction

__all__ = [
    # API
    "analyze_files",
    "load_sources",
    "AnalysisResult",
    "extract_source",
    "ingest_sources",
    "ai_categorize",
    "ai_summarize",
    "extract_from_image",
    "match_category",
    "extract_date",
    "normalize_date",
    "filter_valid",
    "is_valid_transaction",
    "dedup_key",
    "deduplicate",
    "summarize",
    "create_oracle",
    "load_settings",
    "save_settings",
    "clear_settings",
    # Models / types
    "ALLOWED_CATEGORIES",
    "CATEGORY_RULES",
    "Transaction",
    "Transactions",
    "CurrencySummary",
    "MerchantTotal",
    "StatementSummary",
    "StatementSource",
    "BatchResult",
    "FileError",
    "Ledger",
    "Oracle",
    "OpenAIOracle",
    "OracleSettings",
    # Errors
    "StatementLedgerError",
    "SourceReadError",
    "OracleError",
    "OracleUnavailableError",
]

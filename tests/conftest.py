"""Pytest configuration for test isolation.

Oracle settings are read from the process environment and from ``./.env``.
A developer's real API key or a stray ``.env`` in the working tree would make
tests reach for the network or change defaults, so an autouse fixture removes
the relevant variables and runs every test from its own temporary directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

_SETTINGS_ENV_VARS = (
    "STATEMENT_LEDGER_AI_PROVIDER",
    "STATEMENT_LEDGER_AI_KEY",
    "STATEMENT_LEDGER_AI_MODEL",
    "STATEMENT_LEDGER_AI_TIMEOUT",
    "STATEMENT_LEDGER_LOG_LEVEL",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
)


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear settings variables and chdir into the test's temporary directory."""

    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

"""Logging for ``statement_ledger``.

Every module logs through its own ``statement_ledger.<module>`` logger, so one
level on the ``statement_ledger`` logger governs the whole package. Messages
are a ``<module>:<event>`` tag followed by ``key=value`` fields, for example
``ingest:file_failed source=feb.pdf error=PdfReadError: ...``; a grep on the
tag finds every occurrence of one event.

Levels:

- DEBUG: per-stage counts (rows parsed, duplicates dropped, recurring groups).
- INFO: per-file and ledger progress.
- WARNING: oracle retries and AI fallbacks that keep keyword results.
- ERROR: a statement file that could not be read.

Nothing prints until the CLI (or a host application) calls
:func:`configure_logging`; ``STATEMENT_LEDGER_LOG_LEVEL`` picks the level when
none is passed.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "statement_ledger"
_LEVEL_ENV_VAR = "STATEMENT_LEDGER_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = getattr(logging, name, None)
        if isinstance(numeric, int):
            return numeric
        raise ValueError(f"unknown log level: {level!r}")
    env_val = os.getenv(_LEVEL_ENV_VAR)
    if env_val:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        Level as ``int`` or level name (``"DEBUG"``). When ``None`` the
        ``STATEMENT_LEDGER_LOG_LEVEL`` environment variable is honored,
        otherwise ``logging.INFO``.
    fmt:
        Optional format string; defaults to
        ``"%(asctime)s %(name)s %(levelname)s %(message)s"``.
    stream:
        Destination of the single ``StreamHandler`` (``sys.stderr``).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _parse_level(level)
    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name with library-safe defaults.

    Until :func:`configure_logging` runs, the package root logger gets a
    ``NullHandler`` so importing the library never prints anything.
    """

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]

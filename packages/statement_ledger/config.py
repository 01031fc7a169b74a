"""Oracle settings: an explicit, immutable configuration object.

Settings are read once at process start by :func:`load_settings` and passed
into the oracle constructor. Nothing else in the package looks up provider or
key from the environment.

Sources, highest precedence first:

1. the process environment;
2. a ``.env`` file (``python-dotenv``), by default ``./.env``.

Variables
---------
``STATEMENT_LEDGER_AI_PROVIDER``  ``openai`` (default) or ``gemini``
``STATEMENT_LEDGER_AI_KEY``       API key; falls back to ``OPENAI_API_KEY`` or
                                  ``GEMINI_API_KEY`` depending on provider
``STATEMENT_LEDGER_AI_MODEL``     model override
``STATEMENT_LEDGER_AI_TIMEOUT``   request timeout in seconds (default 60)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Literal, cast

from dotenv import dotenv_values, set_key, unset_key

type Provider = Literal["openai", "gemini"]

PROVIDERS: tuple[str, ...] = ("openai", "gemini")
DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.0-flash",
}
_PROVIDER_KEY_FALLBACK: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
}

ENV_PROVIDER = "STATEMENT_LEDGER_AI_PROVIDER"
ENV_KEY = "STATEMENT_LEDGER_AI_KEY"
ENV_MODEL = "STATEMENT_LEDGER_AI_MODEL"
ENV_TIMEOUT = "STATEMENT_LEDGER_AI_TIMEOUT"
_SETTINGS_KEYS: tuple[str, ...] = (ENV_PROVIDER, ENV_KEY, ENV_MODEL, ENV_TIMEOUT)

DEFAULT_TIMEOUT_SEC: float = 60.0
DEFAULT_MAX_ATTEMPTS: int = 3


@dataclass(frozen=True, slots=True)
class OracleSettings:
    provider: Provider = "openai"
    api_key: str | None = None
    model: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SEC
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODELS[self.provider]

    def masked_key(self) -> str:
        """Key suitable for display: last four characters only."""
        if not self.api_key:
            return "(not set)"
        return "****" + self.api_key[-4:]


def _default_env_file() -> Path:
    return Path.cwd() / ".env"


def parse_provider(raw: str | None) -> Provider:
    """Validate a provider name; ``None``/blank means ``openai``."""

    name = (raw or "").strip().lower() or "openai"
    if name not in PROVIDERS:
        raise ValueError(f"unknown AI provider: {raw!r} (expected one of {', '.join(PROVIDERS)})")
    return cast(Provider, name)


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_SEC
    value = float(raw)
    if value <= 0:
        raise ValueError(f"{ENV_TIMEOUT} must be positive, got {raw!r}")
    return value


def load_settings(
    env_file: str | PathLike[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> OracleSettings:
    """Build :class:`OracleSettings` from the environment and a ``.env`` file.

    Raises ``ValueError`` for an unknown provider or an invalid timeout.
    """

    path = Path(env_file) if env_file is not None else _default_env_file()
    file_values = {k: v for k, v in dotenv_values(path).items() if v is not None}
    env = os.environ if environ is None else environ

    def lookup(name: str) -> str | None:
        value = env.get(name)
        if value is None or value == "":
            value = file_values.get(name)
        return value or None

    provider = parse_provider(lookup(ENV_PROVIDER))
    api_key = lookup(ENV_KEY) or lookup(_PROVIDER_KEY_FALLBACK[provider])
    return OracleSettings(
        provider=provider,
        api_key=api_key,
        model=lookup(ENV_MODEL),
        timeout=_parse_timeout(lookup(ENV_TIMEOUT)),
    )


def save_settings(settings: OracleSettings, env_file: str | PathLike[str] | None = None) -> Path:
    """Persist ``settings`` into ``env_file`` and return its path."""

    path = Path(env_file) if env_file is not None else _default_env_file()
    path.touch(exist_ok=True)
    timeout = f"{settings.timeout:g}" if settings.timeout != DEFAULT_TIMEOUT_SEC else None
    values: dict[str, str | None] = {
        ENV_PROVIDER: settings.provider,
        ENV_KEY: settings.api_key,
        ENV_MODEL: settings.model,
        ENV_TIMEOUT: timeout,
    }
    present = dotenv_values(path)
    for key, value in values.items():
        if value:
            set_key(path, key, value, quote_mode="never")
        elif key in present:
            unset_key(path, key, quote_mode="never")
    return path


def clear_settings(env_file: str | PathLike[str] | None = None) -> Path:
    """Remove every oracle setting from ``env_file`` (other keys are kept)."""

    path = Path(env_file) if env_file is not None else _default_env_file()
    if not path.exists():
        return path
    present = dotenv_values(path)
    for key in _SETTINGS_KEYS:
        if key in present:
            unset_key(path, key, quote_mode="never")
    return path


__all__ = [
    "Provider",
    "PROVIDERS",
    "DEFAULT_MODELS",
    "OracleSettings",
    "parse_provider",
    "load_settings",
    "save_settings",
    "clear_settings",
]

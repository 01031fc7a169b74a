"""Narrow boundary to the text/vision completion service.

The deterministic pipeline depends only on the :class:`Oracle` protocol, so
tests substitute an in-process stub. :class:`OpenAIOracle` is the production
implementation built on the ``openai`` SDK's chat completions API; Gemini is
reached through its OpenAI-compatible endpoint with the same client.

Every failure leaving this module is an :class:`~statement_ledger.errors.OracleError`.
Only HTTP 429 and 5xx responses are retried, with a short jittered backoff.
"""

from __future__ import annotations

import base64
import random
import time
from typing import Any, Protocol, runtime_checkable

from openai import OpenAI

from .config import OracleSettings
from .errors import OracleError
from .logging_setup import get_logger

_TEMPERATURE: float = 0.3
_MAX_TOKENS: int = 2000
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (0.5, 2.0)
_JITTER_PCT: float = 0.20

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

_logger = get_logger("statement_ledger.oracle")


@runtime_checkable
class Oracle(Protocol):
    """Text and image completion contract consumed by enrichment."""

    def complete(self, system: str, user: str) -> str: ...

    def complete_with_image(
        self, system: str, user: str, image: bytes, mime_type: str
    ) -> str: ...


# ---- Retry helpers -----------------------------------------------------------


def _is_retryable(exc: BaseException) -> bool:
    """Return True only for HTTP 429 and 5xx errors."""

    sc = getattr(exc, "status_code", None)
    return isinstance(sc, int) and (sc == 429 or 500 <= sc < 600)


def _sleep_backoff(attempt_no: int) -> None:
    if attempt_no - 1 < len(_BACKOFF_SCHEDULE_SEC):
        base = _BACKOFF_SCHEDULE_SEC[attempt_no - 1]
    else:
        base = _BACKOFF_SCHEDULE_SEC[-1]
    jitter = base * _JITTER_PCT
    time.sleep(max(0.0, base + random.uniform(-jitter, jitter)))


def _image_data_url(image: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


# ---- OpenAI-compatible implementation -----------------------------------------


class OpenAIOracle:
    """Chat-completions oracle for OpenAI and Gemini (OpenAI-compatible API)."""

    def __init__(self, settings: OracleSettings, *, client: OpenAI | None = None) -> None:
        if not settings.enabled:
            raise OracleError("no AI API key configured")
        self._settings = settings
        self._model = settings.resolved_model
        if client is None:
            base_url = GEMINI_BASE_URL if settings.provider == "gemini" else None
            # Retries are handled here so that only 429/5xx are retried.
            client = OpenAI(
                api_key=settings.api_key,
                base_url=base_url,
                timeout=settings.timeout,
                max_retries=0,
            )
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    def complete(self, system: str, user: str) -> str:
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
        return self._create(messages, kind="text")

    def complete_with_image(self, system: str, user: str, image: bytes, mime_type: str) -> str:
        messages = [
            {"role": "system", "content": system},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": user},
                    {"type": "image_url", "image_url": {"url": _image_data_url(image, mime_type)}},
                ],
            },
        ]
        return self._create(messages, kind="image")

    def _create(self, messages: list[dict[str, Any]], *, kind: str) -> str:
        max_attempts = max(1, self._settings.max_attempts)
        attempt = 1
        while True:
            t0 = time.perf_counter()
            try:
                resp = self._client.chat.completions.create(
                    model=self._model,
                    messages=messages,  # type: ignore[arg-type]
                    temperature=_TEMPERATURE,
                    max_tokens=_MAX_TOKENS,
                )
                text = _extract_text(resp)
                _logger.debug(
                    "oracle:done kind=%s provider=%s latency_ms=%.2f",
                    kind,
                    self._settings.provider,
                    (time.perf_counter() - t0) * 1000.0,
                )
                return text
            except OracleError:
                raise
            except Exception as e:  # noqa: BLE001
                dt_ms = (time.perf_counter() - t0) * 1000.0
                if attempt >= max_attempts or not _is_retryable(e):
                    raise OracleError(
                        f"{self._settings.provider} API error: {e.__class__.__name__}: {e}"
                    ) from e
                _logger.warning(
                    "oracle:retry kind=%s attempt=%d latency_ms=%.2f error=%s",
                    kind,
                    attempt,
                    dt_ms,
                    e.__class__.__name__,
                )
                _sleep_backoff(attempt)
                attempt += 1


def _extract_text(resp: Any) -> str:
    try:
        content = resp.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as e:
        raise OracleError("unexpected completion response shape") from e
    if not isinstance(content, str) or not content.strip():
        raise OracleError("empty completion response")
    return content


def create_oracle(settings: OracleSettings) -> Oracle | None:
    """Return an oracle for ``settings``, or ``None`` when AI is disabled."""

    if not settings.enabled:
        return None
    return OpenAIOracle(settings)


__all__ = ["GEMINI_BASE_URL", "Oracle", "OpenAIOracle", "create_oracle"]

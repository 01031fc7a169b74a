"""In-process stand-in for :class:`statement_ledger.oracle.Oracle`.

The stub parses the categorization user prompt back into
``index|description|amount|currency`` lines and answers with a JSON array
built by a test-provided ``decide`` callable. Tests can also script raw
replies or exceptions to exercise the fallback paths.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any


def parse_categorize_lines(user: str) -> list[tuple[int, str, str, str]]:
    """Return ``(index, description, amount, currency)`` for each listed item."""

    out: list[tuple[int, str, str, str]] = []
    for line in user.splitlines()[1:]:
        idx, rest = line.split("|", 1)
        description, amount, currency = rest.rsplit("|", 2)
        out.append((int(idx), description, amount, currency))
    return out


class OracleStub:
    """Minimal oracle with scripted behavior.

    Parameters
    ----------
    decide:
        Maps a listed description to a category label (categorization calls).
    reply:
        Fixed raw reply for every text call; overrides ``decide``.
    image_reply:
        Raw reply for ``complete_with_image``.
    error:
        Exception raised by every call.
    """

    def __init__(
        self,
        decide: Callable[[str], Any] | None = None,
        *,
        reply: str | None = None,
        image_reply: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self._decide = decide
        self._reply = reply
        self._image_reply = image_reply
        self._error = error
        self.calls: list[dict[str, Any]] = []

    def complete(self, system: str, user: str) -> str:
        self.calls.append({"kind": "text", "system": system, "user": user})
        if self._error is not None:
            raise self._error
        if self._reply is not None:
            return self._reply
        if self._decide is None:
            raise AssertionError("OracleStub: no reply or decide configured")
        labels = [self._decide(desc) for _i, desc, _a, _c in parse_categorize_lines(user)]
        return "Here you go:\n" + json.dumps(labels)

    def complete_with_image(self, system: str, user: str, image: bytes, mime_type: str) -> str:
        self.calls.append(
            {"kind": "image", "system": system, "user": user, "image": image, "mime": mime_type}
        )
        if self._error is not None:
            raise self._error
        if self._image_reply is None:
            raise AssertionError("OracleStub: no image_reply configured")
        return self._image_reply

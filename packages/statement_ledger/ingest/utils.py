"""Load statement files from disk into :class:`StatementSource` values.

The kind of a file is inferred from its extension. Unknown extensions are
treated as CSV, so an export saved as ``.dat`` or with no extension still
gets a lenient attempt.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Literal

from ..errors import SourceReadError

type SourceKind = Literal["csv", "pdf", "text", "image"]

_KIND_BY_SUFFIX: dict[str, SourceKind] = {
    ".csv": "csv",
    ".pdf": "pdf",
    ".txt": "text",
    ".png": "image",
    ".jpg": "image",
    ".jpeg": "image",
    ".webp": "image",
    ".gif": "image",
}

_IMAGE_MIME_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


@dataclass(frozen=True, slots=True)
class StatementSource:
    """Raw bytes of one uploaded statement plus what kind of file it is."""

    name: str
    data: bytes
    kind: SourceKind

    @property
    def mime_type(self) -> str:
        return _IMAGE_MIME_TYPES.get(Path(self.name).suffix.lower(), "application/octet-stream")


def infer_kind(name: str) -> SourceKind:
    return _KIND_BY_SUFFIX.get(Path(name).suffix.lower(), "csv")


def load_source(path: str | PathLike[str]) -> StatementSource:
    """Read ``path`` and wrap it as a :class:`StatementSource`.

    Raises :class:`SourceReadError` when the file cannot be read.
    """

    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as e:
        raise SourceReadError(p.name, e.strerror or str(e)) from e
    return StatementSource(name=p.name, data=data, kind=infer_kind(p.name))


def decode_text(source: StatementSource) -> str:
    """Decode CSV/text bytes as UTF-8, tolerating a byte-order mark."""

    try:
        return source.data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise SourceReadError(source.name, f"not valid UTF-8 text ({e.reason})") from e


__all__ = ["SourceKind", "StatementSource", "infer_kind", "load_source", "decode_text"]

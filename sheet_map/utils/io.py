"""File IO utilities."""

from __future__ import annotations

import os
import unicodedata
from pathlib import Path

import chardet


def resolve_encoding(path: os.PathLike[str] | str, encoding: str) -> str:
    """Return ``encoding``, sniffing the file contents when it is ``"auto"``."""

    if encoding != "auto":
        return encoding
    with open(path, "rb") as handle:
        detection = chardet.detect(handle.read())
    return detection.get("encoding") or "utf-8"


def export_filename(sheet_id: str, suffix: str) -> str:
    """Return a filesystem safe file name for exports of ``sheet_id``."""

    normalized = unicodedata.normalize("NFKD", sheet_id)
    stem = "".join(c for c in normalized if c.isalnum() or c in {"-", "_"})
    return f"{stem or 'map'}{suffix}"


def ensure_directory(path: os.PathLike[str] | str) -> Path:
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory

"""Utility helpers for the SheetMap project."""

from .formatting import is_link, parse_coordinate
from .io import ensure_directory, export_filename, resolve_encoding

__all__ = [
    "is_link",
    "parse_coordinate",
    "ensure_directory",
    "export_filename",
    "resolve_encoding",
]

"""Formatting and parsing helpers."""

from __future__ import annotations

import math
import re

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_LINK_PATTERN = re.compile(r"^https?://")


def parse_coordinate(value: object) -> float | None:
    """Parse the leading number of a cell value.

    Returns ``None`` when no number can be read or when the result is zero or
    not finite: such cells are indistinguishable from a missing coordinate.
    """

    if value is None:
        return None
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return None
    number = float(match.group(0))
    if not number or not math.isfinite(number):
        return None
    return number


def is_link(text: str | None) -> bool:
    """Return ``True`` for values that should render as a hyperlink."""

    return bool(text) and bool(_LINK_PATTERN.match(text))


"""Popup rows and the JSON payload handed to the map front-end."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..config import MAP_DEFAULTS, MapDefaults
from ..core import ResolvedPoint, Row
from ..utils import is_link

LINK_TEXT = "here"


@dataclass(frozen=True, slots=True)
class PopupRow:
    label: str
    text: str
    is_link: bool

    @property
    def display_text(self) -> str:
        return LINK_TEXT if self.is_link else self.text

    def as_dict(self) -> dict:
        return {
            "label": self.label,
            "text": self.text,
            "display": self.display_text,
            "link": self.is_link,
        }


def popup_rows(row: Row, labels: Sequence[str]) -> list[PopupRow]:
    """Return one popup line per configured label, in label order."""

    lines: list[PopupRow] = []
    for label in labels:
        text = row.get(label)
        text = "" if text is None else str(text)
        lines.append(PopupRow(label=label, text=text, is_link=is_link(text)))
    return lines


def map_payload(
    points: Sequence[ResolvedPoint],
    labels: Sequence[str],
    *,
    defaults: MapDefaults = MAP_DEFAULTS,
) -> dict:
    return {
        "center": list(defaults.center),
        "zoom": defaults.zoom,
        "labels": list(labels),
        "points": [
            {
                "lat": point.lat,
                "lon": point.lon,
                "popup": [line.as_dict() for line in popup_rows(point.source_row, labels)],
            }
            for point in points
        ],
    }

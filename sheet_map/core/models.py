"""Domain models used throughout SheetMap."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Sequence, Union

from .exceptions import ConfigurationError

Row = Mapping[str, str]


@dataclass(frozen=True, slots=True)
class DirectCoordinates:
    """Read latitude and longitude straight from two row columns."""

    lat_column: str
    lon_column: str


@dataclass(frozen=True, slots=True)
class PlaceNameLookup:
    """Resolve a free-text place name column against the place index."""

    name_column: str


ResolutionStrategy = Union[DirectCoordinates, PlaceNameLookup]


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class PlaceRecord:
    """Entry of the place index."""

    id: str
    name: str
    lat: float
    lon: float
    region_names: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SearchHit:
    ref: str
    score: float


@dataclass(slots=True)
class ResolvedPoint:
    """A row that was successfully paired with a coordinate."""

    lat: float
    lon: float
    source_row: Row


@dataclass(slots=True)
class SheetResult:
    """Snapshot returned by a row source."""

    rows: list[dict[str, str]] = field(default_factory=list)
    loading: bool = False


def _split_list(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(","))


@dataclass(frozen=True, slots=True)
class MapConfig:
    """Parameters describing which sheet to map and how to locate its rows."""

    sheet_id: str = ""
    coords_labels: tuple[str, str] | None = None
    location_label: str | None = None
    labels: tuple[str, ...] = ()

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "MapConfig":
        """Build a configuration from URL-style query parameters.

        ``coordsLabels`` and ``labels`` are comma joined column names. Empty
        values are treated as absent; ``coordsLabels`` beyond the first two
        are ignored.
        """

        coords_labels: tuple[str, str] | None = None
        raw_coords = (params.get("coordsLabels") or "").strip()
        if raw_coords:
            names = [name for name in _split_list(raw_coords) if name]
            if len(names) < 2:
                raise ConfigurationError(
                    "coordsLabels must name two columns",
                    details={"coordsLabels": raw_coords},
                )
            coords_labels = (names[0], names[1])

        location_label = (params.get("locationLabel") or "").strip() or None
        labels = tuple(label for label in _split_list(params.get("labels")) if label)

        return cls(
            sheet_id=(params.get("id") or "").strip(),
            coords_labels=coords_labels,
            location_label=location_label,
            labels=labels,
        )

    def strategy(self) -> ResolutionStrategy | None:
        """Return the active resolution strategy.

        Coordinate columns take precedence over the location column; with
        neither configured there is no strategy and every row fails to resolve.
        """

        if self.coords_labels:
            return DirectCoordinates(*self.coords_labels)
        if self.location_label:
            return PlaceNameLookup(self.location_label)
        return None

    def as_params(self) -> dict[str, str]:
        params = {"id": self.sheet_id, "labels": ",".join(self.labels)}
        if self.coords_labels:
            params["coordsLabels"] = ",".join(self.coords_labels)
        if self.location_label:
            params["locationLabel"] = self.location_label
        return params


@dataclass(slots=True)
class ExportSummary:
    """Information returned to API callers after an export job."""

    job_id: str
    created_at: datetime
    completed_at: datetime
    row_count: int
    point_count: int
    generated_files: Sequence[str]

    def as_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "row_count": self.row_count,
            "point_count": self.point_count,
            "generated_files": list(self.generated_files),
        }

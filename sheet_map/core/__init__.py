"""Core domain primitives for SheetMap."""

from .models import (
    Coordinate,
    DirectCoordinates,
    ExportSummary,
    MapConfig,
    PlaceNameLookup,
    PlaceRecord,
    ResolutionStrategy,
    ResolvedPoint,
    Row,
    SearchHit,
    SheetResult,
)
from .exceptions import (
    ConfigurationError,
    PlaceIndexError,
    RowSourceError,
    SheetMapError,
)

__all__ = [
    "Coordinate",
    "DirectCoordinates",
    "ExportSummary",
    "MapConfig",
    "PlaceNameLookup",
    "PlaceRecord",
    "ResolutionStrategy",
    "ResolvedPoint",
    "Row",
    "SearchHit",
    "SheetResult",
    "ConfigurationError",
    "PlaceIndexError",
    "RowSourceError",
    "SheetMapError",
]

"""Custom exception hierarchy for the SheetMap domain."""

from __future__ import annotations


class SheetMapError(RuntimeError):
    """Base class for errors surfaced outside the resolution core."""

    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def as_dict(self) -> dict:
        """Return a serializable representation."""
        payload = {"message": str(self)}
        if self.details:
            payload["details"] = self.details
        return payload


class ConfigurationError(SheetMapError):
    """Raised when map parameters are malformed."""


class RowSourceError(SheetMapError):
    """Raised when rows cannot be fetched from the data source."""


class PlaceIndexError(SheetMapError):
    """Raised when the place index artifact cannot be loaded or built."""

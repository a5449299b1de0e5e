"""Top-level package for the SheetMap backend."""

from .api.app_factory import create_app
from .pipelines import MapSession

__all__ = ["create_app", "MapSession"]

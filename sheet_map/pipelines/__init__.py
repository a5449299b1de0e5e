"""Pipelines keeping map points current."""

from .map_session import BatchTag, MapSession, snapshot_fingerprint

__all__ = ["BatchTag", "MapSession", "snapshot_fingerprint"]

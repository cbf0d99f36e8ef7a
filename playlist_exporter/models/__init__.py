"""
Data Models Layer.

This package contains the models that define the core data structures
used throughout the application, such as configuration, catalog entities
and statistics.
"""

from .catalog import Owner, Playlist, Track, TrackMetadata
from .config import ExportConfig
from .stats import ExportStats

__all__ = [
    "ExportConfig",
    "ExportStats",
    "Owner",
    "Playlist",
    "Track",
    "TrackMetadata",
]

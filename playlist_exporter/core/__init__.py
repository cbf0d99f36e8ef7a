"""
Core application engine for orchestrating the export process.

The `Orchestrator` walks playlists one at a time, a `PlaylistJob` drives a
`WorkerPool` over one playlist's tracks, and the `TrackPipeline` turns each
track into a tagged file.
"""

from .orchestrator import Orchestrator
from .playlist_job import PlaylistJob
from .track_pipeline import TrackOutcome, TrackPipeline
from .worker_pool import PoolResult, WorkerPool

__all__ = [
    "Orchestrator",
    "PlaylistJob",
    "PoolResult",
    "TrackOutcome",
    "TrackPipeline",
    "WorkerPool",
]

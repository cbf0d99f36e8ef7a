"""
Dataclass for tracking export session statistics.
"""

import time
from dataclasses import dataclass, field


@dataclass
class ExportStats:
    """Tracks statistics for an export session."""

    tracks_downloaded: int = 0
    tracks_skipped_exists: int = 0
    tracks_failed: int = 0
    total_size_downloaded: int = 0
    playlists_found: int = 0
    playlists_completed: int = 0
    playlists_failed: int = 0
    failed_track_ids: list[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic, repr=False)

    @property
    def tracks_processed(self) -> int:
        return self.tracks_downloaded + self.tracks_skipped_exists + self.tracks_failed

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start_time

    def record_failure(self, track_id: str) -> None:
        self.tracks_failed += 1
        self.failed_track_ids.append(track_id)

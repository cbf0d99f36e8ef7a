"""
The main orchestrator: scratch-space lifecycle and sequential playlist export.
"""

import json
import logging
import shutil
import time
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from playlist_exporter.media import MediaFetcher, Tagger, Transcoder
from playlist_exporter.models.config import ExportConfig
from playlist_exporter.models.stats import ExportStats

from .playlist_job import PlaylistJob
from .track_pipeline import TrackPipeline

if TYPE_CHECKING:
    from playlist_exporter.api.client import CatalogClient

log = logging.getLogger(__name__)


class Orchestrator:
    """Orchestrates the entire export run."""

    def __init__(
        self,
        config: ExportConfig,
        catalog: "CatalogClient",
        fetcher: MediaFetcher,
        transcoder: Transcoder,
        tagger: Tagger | None = None,
    ):
        self.config = config
        self.catalog = catalog
        self.stats = ExportStats()
        self.scratch_dir = Path(config.scratch_dir)
        self.output_root = Path(config.output_dir)
        self.pipeline = TrackPipeline(
            fetcher,
            transcoder,
            tagger or Tagger(),
            self.scratch_dir,
            self.stats,
        )

    def prepare_scratch(self) -> None:
        """Wipes anything left by a previous run and recreates the directory."""
        shutil.rmtree(self.scratch_dir, ignore_errors=True)
        self.scratch_dir.mkdir(parents=True, exist_ok=True)

    def teardown_scratch(self) -> None:
        shutil.rmtree(self.scratch_dir, ignore_errors=True)

    async def run(self) -> ExportStats:
        """Exports every playlist, one at a time."""
        self.prepare_scratch()
        try:
            log.info("Locating playlists...")
            playlists = await self.catalog.list_playlists()
            self.stats.playlists_found = len(playlists)
            log.info(f"Located {len(playlists)} playlists.")

            for playlist in playlists:
                job = PlaylistJob(
                    playlist,
                    self.pipeline,
                    self.output_root,
                    extension=self.config.extension,
                    concurrency=self.config.max_workers,
                    track_timeout=self.config.track_timeout,
                    stats=self.stats,
                )
                try:
                    await job.run()
                    self.stats.playlists_completed += 1
                except Exception as e:
                    self.stats.playlists_failed += 1
                    log.error(
                        f"[red]✗ Error exporting playlist "
                        f'"{escape(playlist.name)}": {escape(str(e))}[/red]',
                        exc_info=log.getEffectiveLevel() == logging.DEBUG,
                    )
        finally:
            log.info("Cleaning up...")
            self.teardown_scratch()
        return self.stats

    def save_session_stats(self, history_dir: Path) -> None:
        """Appends the current session's stats to a history file."""
        stats_file = history_dir / "session_history.jsonl"
        try:
            history_dir.mkdir(parents=True, exist_ok=True)
            with open(stats_file, "a", encoding="utf-8") as f:
                session_data = {
                    "timestamp": int(time.time()),
                    "playlists_completed": self.stats.playlists_completed,
                    "playlists_failed": self.stats.playlists_failed,
                    "tracks_downloaded": self.stats.tracks_downloaded,
                    "tracks_skipped_exists": self.stats.tracks_skipped_exists,
                    "tracks_failed": self.stats.tracks_failed,
                    "total_size_downloaded": self.stats.total_size_downloaded,
                    "duration_seconds": round(self.stats.elapsed, 2),
                }
                json.dump(session_data, f)
                f.write("\n")
        except OSError as e:
            log.warning(f"[yellow]Could not save session stats:[/] {e}")

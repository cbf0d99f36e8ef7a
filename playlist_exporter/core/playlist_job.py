"""
Exports one playlist: output directory, track list, worker pool.
"""

import logging
from pathlib import Path

from rich.markup import escape

from playlist_exporter.models.catalog import Playlist, Track
from playlist_exporter.models.stats import ExportStats
from playlist_exporter.utils.path import create_dir, playlist_dir, track_destination

from .track_pipeline import TrackPipeline
from .worker_pool import DEFAULT_CONCURRENCY, PoolResult, WorkerPool

log = logging.getLogger(__name__)


class PlaylistJob:
    """
    Drives a `WorkerPool` of `TrackPipeline` runs over one playlist.

    Track failures are logged and counted here, never raised. Failures to
    prepare the directory or fetch the track list propagate to the caller.
    """

    def __init__(
        self,
        playlist: Playlist,
        pipeline: TrackPipeline,
        output_root: Path,
        extension: str = "mp3",
        concurrency: int = DEFAULT_CONCURRENCY,
        track_timeout: float | None = None,
        stats: ExportStats | None = None,
    ):
        self.playlist = playlist
        self.pipeline = pipeline
        self.output_root = output_root
        self.extension = extension
        self.concurrency = concurrency
        self.track_timeout = track_timeout
        self.stats = stats
        self.directory = playlist_dir(
            output_root,
            playlist.owner.username,
            playlist.collection_id,
            playlist.name,
        )
        self.completed = False

    def destination_for(self, track: Track) -> Path:
        return track_destination(self.directory, track.track_id, self.extension)

    async def run(self) -> PoolResult[Track]:
        create_dir(self.directory)
        tracks = await self.playlist.get_track_list()
        log.info(
            f"\n[bold green]🎵 Playlist:[/] {escape(self.playlist.name)} "
            f"[dim]({len(tracks)} tracks)[/dim]"
        )

        pool: WorkerPool[Track] = WorkerPool(
            self._export_track,
            concurrency=self.concurrency,
            timeout=self.track_timeout,
            on_progress=self._on_progress,
            on_failure=self._on_failure,
            on_complete=self._on_complete,
        )
        return await pool.run(tracks)

    async def _export_track(self, track: Track) -> None:
        await self.pipeline.process(track, self.destination_for(track))

    def _on_progress(self, completed: int, total: int) -> None:
        log.info(f"{escape(self.playlist.name)} ({completed}/{total})")

    def _on_failure(self, track: Track, error: BaseException) -> None:
        if self.stats:
            self.stats.record_failure(track.track_id)
        log.error(
            f'  [red]✗ Failed to download "{escape(track.track_id)}":[/] '
            f"{type(error).__name__}: {escape(str(error))}",
            exc_info=(type(error), error, error.__traceback__)
            if log.getEffectiveLevel() == logging.DEBUG
            else None,
        )

    def _on_complete(self, result: PoolResult[Track]) -> None:
        self.completed = True
        summary = f" [red]({result.failed} failed)[/red]" if result.failed else ""
        log.info(
            f'[bold green]✓ Finished downloading playlist "{escape(self.playlist.name)}"'
            f"[/bold green]{summary}"
        )

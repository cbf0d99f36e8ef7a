"""
Handles the processing of a single track, from fetch through transcode to tagging.
"""

import asyncio
import enum
import logging
import os
from pathlib import Path

import aiofiles
from rich.markup import escape

from playlist_exporter.exceptions import MetadataLoadError, ScratchWriteError
from playlist_exporter.media import MediaFetcher, Tagger, Transcoder
from playlist_exporter.models.catalog import Track
from playlist_exporter.models.stats import ExportStats

log = logging.getLogger(__name__)


class TrackOutcome(enum.Enum):
    SKIPPED = "skipped"
    DOWNLOADED = "downloaded"


class TrackPipeline:
    """
    Produces one finished, tagged audio file per track.

    The sequence is strict and never retried:
    skip-check, metadata, audio fetch + classify, scratch write,
    thumbnail (best-effort, alongside transcode), transcode, tag.
    Any non-best-effort failure raises a `TrackError` subclass.

    Scratch files are left in place; the whole scratch directory is
    removed by the orchestrator at the end of the run.
    """

    def __init__(
        self,
        fetcher: MediaFetcher,
        transcoder: Transcoder,
        tagger: Tagger,
        scratch_dir: Path,
        stats: ExportStats | None = None,
    ):
        self.fetcher = fetcher
        self.transcoder = transcoder
        self.tagger = tagger
        self.scratch_dir = scratch_dir
        self.stats = stats

    async def process(self, track: Track, destination: Path) -> TrackOutcome:
        """
        Manages the complete lifecycle of exporting one track to `destination`.
        """
        path_exists = await asyncio.to_thread(os.path.isfile, destination)
        if path_exists:
            if self.stats:
                self.stats.tracks_skipped_exists += 1
            log.debug(
                f"  [yellow]○ Skipping:[/] [dim]{escape(destination.name)}[/dim] (already exists)"
            )
            return TrackOutcome.SKIPPED

        metadata = track.metadata
        if metadata is None:
            try:
                metadata = await track.load_metadata()
            except Exception as e:
                raise MetadataLoadError(
                    f"Could not load metadata for '{track.track_id}': {e}"
                ) from e

        audio, extension = await self.fetcher.fetch_audio(track.audio_url)

        temp_path = self.scratch_dir / f"{track.track_id}.{extension}"
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(audio)
        except OSError as e:
            raise ScratchWriteError(f"Could not write '{temp_path}': {e}") from e

        thumbnail = asyncio.create_task(
            self.fetcher.fetch_thumbnail(track.thumbnail_url)
        )
        try:
            await self.transcoder.transcode(temp_path, destination)
            cover = await thumbnail
        finally:
            if not thumbnail.done():
                thumbnail.cancel()

        await self.tagger.tag(destination, metadata.title, metadata.artists, cover)

        if self.stats:
            self.stats.tracks_downloaded += 1
            if destination.exists():
                self.stats.total_size_downloaded += destination.stat().st_size
        log.debug(f"  [green]✓ Exported:[/] {escape(metadata.title)} -> {destination}")
        return TrackOutcome.DOWNLOADED

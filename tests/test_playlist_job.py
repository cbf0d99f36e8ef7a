"""Test one-playlist export, including the Workout scenario"""

import logging

import mutagen.id3 as id3
import pytest

from playlist_exporter.core.playlist_job import PlaylistJob
from playlist_exporter.exceptions import UnsupportedFormatError
from playlist_exporter.models.catalog import TrackMetadata

from .fakes import JPEG_BYTES, WEBM_BYTES, FakeRoute


@pytest.fixture
def workout(catalog, session):
    """Playlist "Workout" (p1, alice): t1 mpeg+cover, t2 webm no cover, t3 ogg."""
    for tid in ("t1", "t2", "t3"):
        catalog.metadata[tid] = TrackMetadata(title=f"Song {tid}", artists=["Alice"])
    session.routes[catalog.audio_url("t1")] = FakeRoute(content_type="audio/mpeg")
    session.routes[catalog.thumbnail_url("t1")] = FakeRoute(
        content_type="image/jpeg", body=JPEG_BYTES
    )
    session.routes[catalog.audio_url("t2")] = FakeRoute(
        content_type="audio/webm", body=WEBM_BYTES
    )
    session.routes[catalog.thumbnail_url("t2")] = FakeRoute(status=500)
    session.routes[catalog.audio_url("t3")] = FakeRoute(content_type="audio/ogg")
    return catalog.add_playlist("p1", "Workout", "alice", ["t1", "t2", "t3"])


class TestPlaylistJob:
    @pytest.mark.asyncio
    async def test_workout_scenario(self, workout, pipeline, tmp_path, stats, caplog):
        output_root = tmp_path / "download"
        job = PlaylistJob(workout, pipeline, output_root, extension="mp3", stats=stats)

        with caplog.at_level(logging.INFO, logger="playlist_exporter"):
            result = await job.run()

        directory = output_root / "alice" / "p1 - Workout"
        t1 = id3.ID3(directory / "t1.mp3")
        assert t1.getall("APIC")[0].data == JPEG_BYTES
        t2 = id3.ID3(directory / "t2.mp3")
        assert t2["TIT2"].text[0] == "Song t2"
        assert t2.getall("APIC") == []
        assert not (directory / "t3.mp3").exists()

        assert job.completed
        assert result.succeeded == 2
        assert result.failed == 1
        assert isinstance(result.failures[0][1], UnsupportedFormatError)
        assert stats.failed_track_ids == ["t3"]
        assert 'Failed to download "t3"' in caplog.text
        assert 'Finished downloading playlist "Workout"' in caplog.text

    @pytest.mark.asyncio
    async def test_rerun_skips_existing_files(
        self, workout, pipeline, tmp_path, session, stats
    ):
        output_root = tmp_path / "download"
        await PlaylistJob(workout, pipeline, output_root).run()
        requests_after_first_run = len(session.requested)

        result = await PlaylistJob(workout, pipeline, output_root).run()

        # only the unsupported track is fetched again
        assert len(session.requested) == requests_after_first_run + 1
        assert result.failed == 1
        assert stats.tracks_skipped_exists == 2

    def test_destination_is_deterministic(self, catalog, pipeline, tmp_path):
        playlist = catalog.add_playlist("p9", "Road: Trip?", "bob", [])
        first = PlaylistJob(playlist, pipeline, tmp_path, extension="mp3")
        second = PlaylistJob(playlist, pipeline, tmp_path, extension="mp3")
        track = type("T", (), {"track_id": "t5"})()

        assert first.destination_for(track) == second.destination_for(track)
        assert first.directory.parent == tmp_path / "bob"
        assert first.directory.name.startswith("p9 - ")
        assert ":" not in first.directory.name and "?" not in first.directory.name

    @pytest.mark.asyncio
    async def test_empty_playlist_completes(self, catalog, pipeline, tmp_path):
        playlist = catalog.add_playlist("p2", "Empty", "alice", [])
        job = PlaylistJob(playlist, pipeline, tmp_path)

        result = await job.run()

        assert job.completed
        assert result.total == 0
        assert job.directory.is_dir()

    @pytest.mark.asyncio
    async def test_track_list_failure_propagates(self, catalog, pipeline, tmp_path):
        playlist = catalog.add_playlist("p3", "Broken", "alice", ["t1"])
        catalog.broken_playlists.add("p3")

        with pytest.raises(Exception, match="unavailable"):
            await PlaylistJob(playlist, pipeline, tmp_path).run()

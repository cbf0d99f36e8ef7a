"""In-memory stand-ins for the catalog server, HTTP session and converter."""

import asyncio
import shutil
from dataclasses import dataclass, field
from pathlib import Path

import aiohttp

from playlist_exporter.exceptions import ExternalToolError
from playlist_exporter.models.catalog import Owner, Playlist, Track, TrackMetadata

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64
MP3_BYTES = b"\xff\xfb\x90\x00" + b"\x00" * 256
WEBM_BYTES = b"\x1a\x45\xdf\xa3" + b"\x00" * 256
# "fLaC", then a lone STREAMINFO block: 44.1 kHz, stereo, 16-bit, no frames
FLAC_BYTES = (
    b"fLaC"
    + b"\x80\x00\x00\x22"
    + b"\x10\x00\x10\x00"
    + b"\x00\x00\x00\x00\x00\x00"
    + b"\x0a\xc4\x42\xf0"
    + b"\x00" * 20
)


@dataclass
class FakeRoute:
    status: int = 200
    content_type: str = "audio/mpeg"
    body: bytes = MP3_BYTES
    error: Exception | None = None


class FakeResponse:
    def __init__(self, route: FakeRoute):
        self.status = route.status
        self.headers = {"Content-Type": route.content_type} if route.content_type else {}
        self._body = route.body

    async def read(self) -> bytes:
        await asyncio.sleep(0)
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Mimics the part of `aiohttp.ClientSession` the fetcher uses."""

    def __init__(self, routes: dict[str, FakeRoute] | None = None):
        self.routes = routes or {}
        self.requested: list[str] = []
        self.closed = False

    def get(self, url: str, allow_redirects: bool = True):
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            route = FakeRoute(status=404, content_type="text/plain", body=b"")
        if route.error is not None:
            raise route.error
        return FakeResponse(route)

    async def close(self):
        self.closed = True


class FakeCatalogClient:
    """Serves playlists and tracks from dictionaries."""

    def __init__(self):
        self.metadata: dict[str, TrackMetadata] = {}
        self.playlist_tracks: dict[str, list[str]] = {}
        self.playlists: list[Playlist] = []
        self.broken_playlists: set[str] = set()
        self.metadata_calls: list[str] = []

    def audio_url(self, track_id: str) -> str:
        return f"https://pb.test/v1/audio/{track_id}"

    def thumbnail_url(self, track_id: str) -> str:
        return f"https://pb.test/v1/tracks/{track_id}/thumbnail"

    def add_playlist(
        self, collection_id: str, name: str, owner: str, track_ids: list[str]
    ) -> Playlist:
        playlist = Playlist(collection_id, name, Owner(owner), client=self)
        self.playlists.append(playlist)
        self.playlist_tracks[collection_id] = list(track_ids)
        return playlist

    async def list_playlists(self) -> list[Playlist]:
        return list(self.playlists)

    async def fetch_playlist_tracks(self, collection_id: str) -> list[Track]:
        await asyncio.sleep(0)
        if collection_id in self.broken_playlists:
            raise aiohttp.ClientError(f"playlist {collection_id} unavailable")
        return [Track(tid, client=self) for tid in self.playlist_tracks[collection_id]]

    async def fetch_track_metadata(self, track_id: str) -> TrackMetadata:
        self.metadata_calls.append(track_id)
        await asyncio.sleep(0)
        if track_id not in self.metadata:
            raise KeyError(track_id)
        return self.metadata[track_id]


@dataclass
class CopyTranscoder:
    """Copies the source to the destination instead of running ffmpeg."""

    failing: set[str] = field(default_factory=set)
    calls: list[tuple[Path, Path]] = field(default_factory=list)

    async def transcode(self, source: Path, destination: Path) -> None:
        self.calls.append((source, destination))
        await asyncio.sleep(0)
        if source.stem in self.failing:
            raise ExternalToolError(f"Converter exited with code 1 for '{source.name}'")
        shutil.copyfile(source, destination)

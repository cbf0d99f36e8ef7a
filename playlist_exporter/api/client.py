"""
Thin async client for the Pipe Bomb catalog server.
"""

import logging
import time
from typing import Any

import aiohttp

from playlist_exporter.exceptions import AuthenticationError
from playlist_exporter.models.catalog import Owner, Playlist, Track, TrackMetadata

from .auth import CatalogAuthenticator

log = logging.getLogger(__name__)


class CatalogClient:
    """
    Async client for the catalog server's JSON API (v1).

    Only the calls the exporter needs are implemented: playlist listing,
    playlist track lists, track metadata, and the media URLs.
    """

    def __init__(self, server: str, private_key: str, max_workers: int = 15):
        """
        Initializes the API client.

        Args:
            server: Base address of the catalog server.
            private_key: The user's private key, exchanged for a token.
            max_workers: The number of concurrent workers, used to tune the connection pool.
        """
        self.server = server.rstrip("/")
        self.private_key = private_key
        self.max_workers = max_workers

        # Set by the authenticator
        self.token: str | None = None

        self._session: aiohttp.ClientSession | None = None
        self._authenticator = CatalogAuthenticator(self)

    @property
    def authenticator(self) -> CatalogAuthenticator:
        """Provides access to the authentication helper."""
        return self._authenticator

    @property
    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _initialize_session(self) -> None:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_workers * 2,
                limit_per_host=self.max_workers,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"Accept-Encoding": "gzip, deflate"},
                timeout=aiohttp.ClientTimeout(total=60, connect=15, sock_read=30),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def url(self, endpoint: str) -> str:
        return f"{self.server}/{endpoint.lstrip('/')}"

    async def api_call(
        self, endpoint: str, method: str = "GET", json_body: Any = None
    ) -> Any:
        """
        Makes a call and returns the payload, unwrapping `{"response": ...}`
        envelopes.
        """
        await self._initialize_session()
        start_time = time.monotonic()
        async with self._session.request(
            method, self.url(endpoint), json=json_body, headers=self.auth_headers
        ) as r:
            duration_ms = (time.monotonic() - start_time) * 1000
            log.debug(f"{method} {endpoint} -> {r.status} ({duration_ms:.0f} ms)")

            if r.status in (401, 403):
                raise AuthenticationError(
                    f"The catalog server rejected the request to '{endpoint}' "
                    f"(HTTP {r.status})."
                )
            r.raise_for_status()
            payload = await r.json(content_type=None)

        if isinstance(payload, dict) and "response" in payload:
            return payload["response"]
        return payload

    # Public API Methods
    async def list_playlists(self) -> list[Playlist]:
        items = await self.api_call("v1/playlists")
        return [self._playlist_from_json(item) for item in items or []]

    async def fetch_playlist_tracks(self, collection_id: str) -> list[Track]:
        data = await self.api_call(f"v1/playlists/{collection_id}")
        items = data.get("trackList", []) if isinstance(data, dict) else data
        return [self._track_from_json(item) for item in items or []]

    async def fetch_track_metadata(self, track_id: str) -> TrackMetadata:
        data = await self.api_call(f"v1/tracks/{track_id}")
        if isinstance(data, dict) and isinstance(data.get("metadata"), dict):
            data = data["metadata"]
        return TrackMetadata.model_validate(data)

    def audio_url(self, track_id: str) -> str:
        return self.url(f"v1/audio/{track_id}")

    def thumbnail_url(self, track_id: str) -> str:
        return self.url(f"v1/tracks/{track_id}/thumbnail")

    def _playlist_from_json(self, item: dict[str, Any]) -> Playlist:
        owner = item.get("owner") or {}
        return Playlist(
            collection_id=str(item["collectionID"]),
            name=item.get("name", f"playlist_{item['collectionID']}"),
            owner=Owner(username=owner.get("username", "unknown")),
            client=self,
        )

    def _track_from_json(self, item: Any) -> Track:
        if not isinstance(item, dict):
            return Track(track_id=str(item), client=self)
        metadata = item.get("metadata")
        return Track(
            track_id=str(item["trackID"]),
            client=self,
            metadata=TrackMetadata.model_validate(metadata) if metadata else None,
        )

"""
Handles the low-level fetching of audio and thumbnail bytes over HTTP and the
classification of fetched audio by its declared MIME type.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from playlist_exporter.exceptions import TransportError, UnsupportedFormatError

log = logging.getLogger(__name__)

# Audio subtypes the catalog server is known to emit. Deliberately exhaustive.
AUDIO_SUBTYPE_EXTENSIONS = {
    "webm": "webm",
    "mpeg": "mp3",
}


def classify_content_type(content_type: str | None) -> str:
    """
    Maps a declared `audio/*` content type to a file extension.

    Raises:
        UnsupportedFormatError: If the type is missing, not audio, or its
        subtype is not in `AUDIO_SUBTYPE_EXTENSIONS`.
    """
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if not mime.startswith("audio/"):
        raise UnsupportedFormatError(f'Mime type "{content_type or ""}" not supported.')

    extension = AUDIO_SUBTYPE_EXTENSIONS.get(mime[len("audio/") :])
    if not extension:
        raise UnsupportedFormatError(f'Mime type "{content_type}" not supported.')
    return extension


@dataclass
class FetchResult:
    data: bytes
    content_type: str
    status: int


class MediaFetcher:
    """Fetches raw media for tracks through one shared aiohttp session."""

    def __init__(
        self,
        max_workers: int = 15,
        headers: dict[str, str] | None = None,
        session: Any = None,
    ):
        """
        Args:
            max_workers: Concurrent workers, used to size the connection pool.
            headers: Extra request headers (e.g. catalog authorization).
            session: An existing session to use instead of creating one.
        """
        self.max_workers = max_workers
        self.headers = headers or {}
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> Any:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_workers * 2,
                limit_per_host=self.max_workers,
                ttl_dns_cache=600,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=None, sock_connect=15),
            )
            self._owns_session = True
            log.debug(f"Created fetch session with limit_per_host={self.max_workers}")
        return self._session

    async def close(self) -> None:
        """Closes the session if this fetcher created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            log.debug("Media fetch session closed.")

    async def fetch(self, url: str) -> FetchResult:
        """
        Downloads the full body of `url` into memory.

        Raises:
            TransportError: On a non-2xx response or any network failure.
        """
        session = await self._get_session()
        try:
            async with session.get(url, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(f"HTTP {response.status} fetching {url}")
                data = await response.read()
                return FetchResult(
                    data=data,
                    content_type=response.headers.get("Content-Type", ""),
                    status=response.status,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Failed to fetch {url}: {e}") from e

    async def fetch_audio(self, url: str) -> tuple[bytes, str]:
        """Fetches audio and returns its bytes with the resolved extension."""
        result = await self.fetch(url)
        return result.data, classify_content_type(result.content_type)

    async def fetch_thumbnail(self, url: str) -> bytes | None:
        """Best-effort cover fetch. Returns None on any failure."""
        try:
            result = await self.fetch(url)
        except TransportError as e:
            log.debug(f"Thumbnail unavailable ({e})")
            return None
        if result.status != 200 or not result.data:
            log.debug(f"Thumbnail unavailable (HTTP {result.status}, {url})")
            return None
        return result.data
